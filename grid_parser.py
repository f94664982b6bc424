"""
Grid parsing utilities.

Provides two compact text formats for building puzzles by hand:
1. Tile grids with space-separated pattern codes and optional rotations
2. Mazes with single-character cells
"""

from __future__ import annotations

from grid_types import CellType, GridConfig, GridTile, MazeGrid, Position, TilePattern
from keyfinder import find_path
from pathfinder import compute_optimal_moves
from rotation import normalize_rotation
from tile_patterns import get_tile_pattern_by_id

__all__ = ["PATTERN_CODES", "parse_maze", "parse_tile_grid"]

PATTERN_CODES: dict[str, str] = {
    "SH": "straight_horizontal",
    "SV": "straight_vertical",
    "CTR": "corner_top_right",
    "CTL": "corner_top_left",
    "CBR": "corner_bottom_right",
    "CBL": "corner_bottom_left",
    "TT": "t_junction_top",
    "TB": "t_junction_bottom",
    "TL": "t_junction_left",
    "TR": "t_junction_right",
    "X": "cross",
}

MAZE_CHARS: dict[str, CellType] = {
    ".": CellType.EMPTY,
    "#": CellType.WALL,
    "S": CellType.START,
    "K": CellType.KEY,
    "E": CellType.EXIT,
}


def _check_square(rows: list[list[object]], row_strings: list[str], kind: str) -> None:
    size = len(rows)
    mismatched = [(i, len(row)) for i, row in enumerate(rows) if len(row) != size]
    if mismatched:
        error_msg = (
            f"{kind} must be square\n"
            f"  Expected: {size} columns (one per row)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{row_strings[row_idx]}\"\n"
        raise ValueError(error_msg.rstrip("\n"))


def _parse_tile(cell_str: str, row_idx: int, col_idx: int, row_str: str) -> tuple[TilePattern, int]:
    code, _, rotation_str = cell_str.partition("@")
    pattern_id = PATTERN_CODES.get(code.upper(), code)
    pattern = get_tile_pattern_by_id(pattern_id)

    rotation: int | None = None
    if pattern is not None:
        try:
            rotation = normalize_rotation(int(rotation_str)) if rotation_str else 0
        except ValueError:
            rotation = None

    if pattern is None or rotation is None:
        error_msg = (
            f"Invalid tile string: '{cell_str}'\n"
            f"  Row {row_idx}: \"{row_str}\"\n"
            f"  Position: column {col_idx}\n"
            f"  Valid formats:\n"
            f"    - Pattern code (e.g., 'SH', 'CTR', 'X') or full id (e.g., 'cross')\n"
            f"    - Optional '@' rotation: 0, 90, 180 or 270 (e.g., 'CBL@90')"
        )
        raise ValueError(error_msg)
    return pattern, rotation


def parse_tile_grid(definition: str, level_number: int = 1) -> GridConfig:
    """
    Parse a Path Finder grid from a compact string format.

    Format:
    - Rows separated by |
    - Cells separated by whitespace
    - Each cell is CODE or CODE@ROTATION, CODE being a key of PATTERN_CODES
      or a full pattern id; rotation defaults to 0

    Example:
        "CBR SH CBL|SH X SH|CTR SH CTL"
        Creates a 3x3 grid whose middle row runs straight-cross-straight,
        connecting start (1, 0) to end (1, 2).

    Args:
        definition: The grid string
        level_number: Level used for the optimal-moves estimate

    Returns:
        GridConfig with start and end on the middle row edges
    """
    row_strings = [s.strip() for s in definition.strip().split("|")]
    rows: list[list[GridTile]] = []

    for row_idx, row_str in enumerate(row_strings):
        tiles: list[GridTile] = []
        for col_idx, cell_str in enumerate(row_str.split()):
            pattern, rotation = _parse_tile(cell_str, row_idx, col_idx, row_str)
            tiles.append(GridTile(row_idx, col_idx, pattern, rotation))
        rows.append(tiles)

    _check_square(rows, row_strings, "Tile grid")
    size = len(rows)
    if size < 2:
        raise ValueError(f"Tile grid must be at least 2x2, got {size}x{size}")

    middle = size // 2
    return GridConfig(
        tiles=rows,
        grid_size=size,
        start_position=Position(middle, 0),
        end_position=Position(middle, size - 1),
        optimal_moves=compute_optimal_moves(size, level_number),
    )


def parse_maze(definition: str) -> MazeGrid:
    """
    Parse a maze from a concise format.

    Format:
    - One character per cell, no separators
    - Rows separated by | or newlines (surrounding whitespace ignored)
    - Cell types: '.' empty, '#' wall, 'S' start, 'K' key, 'E' exit
    - Exactly one each of S, K and E

    Example:
        \"\"\"
        S.#
        .#K
        ..E
        \"\"\"

    The optimal path length is computed by BFS, 0 when either leg is blocked.
    """
    row_strings = [s.strip() for s in definition.replace("|", "\n").split("\n") if s.strip()]
    rows: list[list[CellType]] = []
    found: dict[CellType, list[Position]] = {CellType.START: [], CellType.KEY: [], CellType.EXIT: []}

    for row_idx, row_str in enumerate(row_strings):
        cells: list[CellType] = []
        for col_idx, char in enumerate(row_str):
            if char not in MAZE_CHARS:
                error_msg = (
                    f"Invalid maze character: '{char}'\n"
                    f"  Row {row_idx}: \"{row_str}\"\n"
                    f"  Position: column {col_idx}\n"
                    f"  Valid characters: '.', '#', 'S', 'K', 'E'"
                )
                raise ValueError(error_msg)
            cell = MAZE_CHARS[char]
            if cell in found:
                found[cell].append(Position(row_idx, col_idx))
            cells.append(cell)
        rows.append(cells)

    _check_square(rows, row_strings, "Maze")

    for cell_type, positions in found.items():
        if len(positions) != 1:
            raise ValueError(
                f"Maze must contain exactly one {cell_type.value} cell, found {len(positions)}"
            )

    start, key, exit_ = found[CellType.START][0], found[CellType.KEY][0], found[CellType.EXIT][0]
    path_to_key = find_path(rows, start, key)
    path_to_exit = find_path(rows, key, exit_)
    optimal = len(path_to_key) + len(path_to_exit) if path_to_key and path_to_exit else 0

    return MazeGrid(
        cells=rows,
        grid_size=len(rows),
        start_position=start,
        key_position=key,
        exit_position=exit_,
        optimal_path_length=optimal,
    )
