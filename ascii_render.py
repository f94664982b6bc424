"""
ASCII rendering for tile grids and mazes.

Each puzzle is drawn as a bordered box with one fixed-width slot per cell.
Colours come from simple_chalk and can be switched off for plain text.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

import simple_chalk as chalk  # type: ignore[import-untyped]

from grid_types import CellType, Direction, GridConfig, MazeGrid, Position
from pathfinder import TileOverlay, compute_overlays, tile_exits

logger = logging.getLogger(__name__)

Colorize = Callable[[str], str]

UP, DOWN, LEFT, RIGHT = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT

TILE_GLYPHS: dict[frozenset[Direction], str] = {
    frozenset({LEFT, RIGHT}): "─",
    frozenset({UP, DOWN}): "│",
    frozenset({UP, RIGHT}): "└",
    frozenset({UP, LEFT}): "┘",
    frozenset({DOWN, RIGHT}): "┌",
    frozenset({DOWN, LEFT}): "┐",
    frozenset({UP, DOWN, RIGHT}): "├",
    frozenset({UP, DOWN, LEFT}): "┤",
    frozenset({LEFT, RIGHT, DOWN}): "┬",
    frozenset({LEFT, RIGHT, UP}): "┴",
    frozenset({UP, DOWN, LEFT, RIGHT}): "┼",
}

MAZE_CHARS: dict[CellType, str] = {
    CellType.EMPTY: ".",
    CellType.WALL: "#",
    CellType.START: "S",
    CellType.KEY: "K",
    CellType.EXIT: "E",
}


def _plain(s: str) -> str:
    return s


def _framed(title: str, body_rows: Iterable[list[str]], inner_width: int, colorize: Colorize) -> str:
    """Wrap pre-rendered rows in a box with the title centred in the top border."""
    grid_width = inner_width + 2
    title = f" {title} "

    title_line = "┌" + "─" * (grid_width - 2) + "┐"
    if len(title) <= grid_width - 2:
        title_start = (grid_width - len(title)) // 2
        title_line = (
            "┌" +
            "─" * (title_start - 1) +
            title +
            "─" * (grid_width - title_start - len(title) - 1) +
            "┐"
        )

    lines = [colorize(title_line)]
    for parts in body_rows:
        lines.append(colorize("│") + "".join(parts) + colorize("│"))
    lines.append(colorize("└" + "─" * (grid_width - 2) + "┘"))
    return "\n".join(lines)


def tile_glyph(exits: Iterable[Direction], cell_width: int = 3) -> str:
    """Box-drawing text for one tile, padded with arms toward side exits."""
    exit_set = frozenset(exits)
    glyph = TILE_GLYPHS.get(exit_set, "?")
    if cell_width < 3:
        return glyph
    pad = (cell_width - 1) // 2
    left = ("─" if LEFT in exit_set else " ") * pad
    right = ("─" if RIGHT in exit_set else " ") * (cell_width - 1 - pad)
    return left + glyph + right


def _tile_color(overlay: TileOverlay, color: bool) -> Colorize:
    if not color:
        return _plain
    if overlay.is_selected:
        return chalk.bgWhite.black
    if overlay.is_start or overlay.is_end:
        return chalk.yellow
    if overlay.is_in_path:
        return chalk.green
    return chalk.white


def render_tile_grid(
    grid: GridConfig,
    path_tiles: Iterable[Position] = (),
    selected: Position | None = None,
    cell_width: int = 3,
    color: bool = True,
    title: str = "path finder",
) -> str:
    """
    Render a Path Finder grid.

    Args:
        grid: The grid to draw
        path_tiles: Cells of a validated route (drawn green)
        selected: Currently selected cell (drawn inverted)
        cell_width: Characters per cell (default 3)
        color: Emit ANSI colours
        title: Text in the top border

    Returns:
        Multi-line string
    """
    overlays = compute_overlays(grid, path_tiles, selected)
    border = chalk.blue if color else _plain

    body: list[list[str]] = []
    for tile_row, overlay_row in zip(grid.tiles, overlays):
        parts = [
            _tile_color(overlay, color)(tile_glyph(tile_exits(tile), cell_width))
            for tile, overlay in zip(tile_row, overlay_row)
        ]
        body.append(parts)

    logger.debug("render_tile_grid: size=%d, cell_width=%d", grid.grid_size, cell_width)
    return _framed(title, body, grid.grid_size * cell_width, border)


def render_maze(
    maze: MazeGrid,
    player: Position | None = None,
    has_key: bool = False,
    reveal_walls: bool = True,
    cell_width: int = 3,
    color: bool = True,
    title: str = "key finder",
) -> str:
    """
    Render a Key Finder maze.

    Args:
        maze: The maze to draw
        player: Token position, drawn as '@'
        has_key: Once the key is held its cell is drawn empty
        reveal_walls: Draw walls as '#'; when False they look like empty cells
        cell_width: Characters per cell (default 3)
        color: Emit ANSI colours
        title: Text in the top border
    """
    colors: dict[CellType, Colorize] = {
        CellType.EMPTY: chalk.white,
        CellType.WALL: chalk.red,
        CellType.START: chalk.yellow,
        CellType.KEY: chalk.cyan,
        CellType.EXIT: chalk.green,
    }
    border = chalk.blue if color else _plain

    body: list[list[str]] = []
    for r, row in enumerate(maze.cells):
        parts: list[str] = []
        for c, cell in enumerate(row):
            shown = cell
            if cell == CellType.WALL and not reveal_walls:
                shown = CellType.EMPTY
            elif cell == CellType.KEY and has_key:
                shown = CellType.EMPTY

            if player is not None and player == Position(r, c):
                content = "@".center(cell_width)
                parts.append(chalk.bgWhite.black(content) if color else content)
            else:
                content = MAZE_CHARS[shown].center(cell_width)
                parts.append(colors[shown](content) if color else content)
        body.append(parts)

    return _framed(title, body, maze.grid_size * cell_width, border)
