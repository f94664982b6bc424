"""
Path Finder engine: grid generation, path validation, tile actions and scoring.

The player rotates or flips tiles until the start cell (middle of the left
edge) is connected to the end cell (middle of the right edge). Validation is
a plain breadth-first search re-run from scratch after every action.
"""

from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable

from grid_types import (
    Direction,
    GridConfig,
    GridTile,
    Position,
    RandomSource,
    ShapeCategory,
    in_bounds,
)
from rotation import VALID_ROTATIONS, normalize_rotation, opposite, rotate_directions
from tile_patterns import get_random_tile_pattern

logger = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT = 240
MAX_DIFFICULTY = 3

VALID_PATH_MESSAGE = "Valid path found!"
NO_PATH_MESSAGE = "No valid path found. Keep adjusting tiles!"


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class PathValidationResult:
    """Outcome of a validation run."""

    is_valid: bool
    path_tiles: list[Position] = field(default_factory=list)
    message: str = ""


@dataclass(frozen=True)
class ScoreCalculation:
    """Path Finder score breakdown."""

    base_score: int
    time_bonus: int
    move_penalty: int
    final_score: int
    efficiency: float


@dataclass(frozen=True)
class TileOverlay:
    """Display-only flags for one cell, derived from game state."""

    is_start: bool = False
    is_end: bool = False
    is_selected: bool = False
    is_in_path: bool = False


# =============================================================================
# Generation
# =============================================================================


def compute_optimal_moves(grid_size: int, level_number: int) -> int:
    """Heuristic move budget for scoring; not a solvability guarantee."""
    return math.floor((grid_size - 1) * 1.5 * (1 + level_number * 0.1))


def generate_grid(
    grid_size: int,
    level_number: int,
    rng: RandomSource | None = None,
) -> GridConfig:
    """
    Build a grid of randomly chosen, randomly rotated tiles.

    Start and end sit on the middle row at the two horizontal extremes and get
    random tiles like every other cell. Nothing here checks that the grid can
    be solved; that is up to the player.

    Args:
        grid_size: Number of rows (and columns)
        level_number: 1-based level; caps tile difficulty at min(level, 3)
        rng: Random source (a fresh random.Random when omitted)

    Raises:
        ValueError: If grid_size < 2 or level_number < 1
    """
    if grid_size < 2:
        raise ValueError(f"Grid size must be at least 2, got {grid_size}")
    if level_number < 1:
        raise ValueError(f"Level number must be at least 1, got {level_number}")
    if rng is None:
        rng = random.Random()

    max_difficulty = min(level_number, MAX_DIFFICULTY)
    tiles: list[list[GridTile]] = []
    for r in range(grid_size):
        row: list[GridTile] = []
        for c in range(grid_size):
            pattern = get_random_tile_pattern(max_difficulty, rng)
            rotation = VALID_ROTATIONS[rng.randrange(len(VALID_ROTATIONS))]
            row.append(GridTile(r, c, pattern, rotation))
        tiles.append(row)

    middle = grid_size // 2
    optimal_moves = compute_optimal_moves(grid_size, level_number)
    logger.debug(
        "generate_grid: size=%d, level=%d, max_difficulty=%d, optimal_moves=%d",
        grid_size,
        level_number,
        max_difficulty,
        optimal_moves,
    )
    return GridConfig(
        tiles=tiles,
        grid_size=grid_size,
        start_position=Position(middle, 0),
        end_position=Position(middle, grid_size - 1),
        optimal_moves=optimal_moves,
    )


# =============================================================================
# Validation
# =============================================================================


def tile_exits(tile: GridTile) -> tuple[Direction, ...]:
    """The directions a tile currently connects to, rotation applied."""
    return rotate_directions(tile.pattern.exits, tile.rotation)


def validate_path(grid: GridConfig) -> PathValidationResult:
    """
    Check whether the start tile is currently connected to the end tile.

    A step from one tile to its neighbour counts only when the edges match on
    both sides: the current tile has an exit facing the neighbour and the
    neighbour has an exit facing back. The end tile is never asked for onward
    exits since the search stops as soon as it is dequeued.

    Returns:
        PathValidationResult with the route (start and end inclusive) when
        one exists, otherwise an empty route
    """
    size = grid.grid_size
    start, end = grid.start_position, grid.end_position

    visited = [[False] * size for _ in range(size)]
    visited[start.row][start.col] = True
    queue: deque[tuple[Position, list[Position]]] = deque([(start, [start])])

    while queue:
        pos, path = queue.popleft()
        if pos == end:
            logger.debug("validate_path: connected in %d tiles", len(path))
            return PathValidationResult(True, path, VALID_PATH_MESSAGE)

        exits = tile_exits(grid.tile_at(pos))
        for direction in Direction:
            nxt = pos.step(direction)
            if not in_bounds(nxt, size) or visited[nxt.row][nxt.col]:
                continue
            if direction not in exits:
                continue
            if opposite(direction) not in tile_exits(grid.tile_at(nxt)):
                continue
            visited[nxt.row][nxt.col] = True
            queue.append((nxt, path + [nxt]))

    return PathValidationResult(False, [], NO_PATH_MESSAGE)


# =============================================================================
# Tile Actions
# =============================================================================


def rotate_tile(tile: GridTile) -> GridTile:
    """Return the tile turned 90° clockwise. The caller writes it back."""
    return replace(tile, rotation=normalize_rotation(tile.rotation + 90))


def _flip_straight(rotation: int) -> int:
    if rotation % 180 == 0:
        return (rotation + 90) % 360
    return (rotation + 270) % 360


def _flip_corner(rotation: int) -> int:
    # 0 and 180 are fixed points
    return {90: 270, 270: 90}.get(rotation, rotation)


def _flip_half_turn(rotation: int) -> int:
    return (rotation + 180) % 360


FLIP_TRANSFORMS: dict[ShapeCategory, Callable[[int], int]] = {
    ShapeCategory.STRAIGHT: _flip_straight,
    ShapeCategory.CORNER: _flip_corner,
    ShapeCategory.T_JUNCTION: _flip_half_turn,
    ShapeCategory.CROSS: _flip_half_turn,
}


def flip_tile(tile: GridTile) -> GridTile:
    """
    Return the tile mirrored. The effect depends on the shape:

    - straight: moves to the other member of its orientation pair
    - corner: swaps 90 and 270, leaves 0 and 180 alone
    - T-junction, cross: half turn
    """
    transform = FLIP_TRANSFORMS[tile.pattern.category]
    return replace(tile, rotation=transform(normalize_rotation(tile.rotation)))


# =============================================================================
# Scoring and Display
# =============================================================================


def calculate_score(
    completion_time: float,
    time_limit: float,
    total_moves: int,
    optimal_moves: int,
) -> ScoreCalculation:
    """
    Score a finished Path Finder puzzle.

    Args:
        completion_time: Seconds taken
        time_limit: Seconds allowed
        total_moves: Rotations plus flips made
        optimal_moves: The grid's move budget
    """
    base_score = 100

    time_bonus = 0
    if completion_time < 60:
        time_bonus = 50
    elif completion_time < time_limit:
        time_bonus = math.floor(25 * (time_limit - completion_time) / time_limit)

    move_penalty = (total_moves - optimal_moves) * 10 if total_moves > optimal_moves else 0
    final_score = max(base_score + time_bonus - move_penalty, 10)
    # No moves made counts as fully efficient
    efficiency = optimal_moves / total_moves * 100 if total_moves else 100.0

    return ScoreCalculation(base_score, time_bonus, move_penalty, final_score, efficiency)


def compute_overlays(
    grid: GridConfig,
    path_tiles: Iterable[Position] = (),
    selected: Position | None = None,
) -> list[list[TileOverlay]]:
    """Derive per-cell display flags from a validation path and a selection."""
    on_path = set(path_tiles)
    return [
        [
            TileOverlay(
                is_start=tile.position == grid.start_position,
                is_end=tile.position == grid.end_position,
                is_selected=tile.position == selected,
                is_in_path=tile.position in on_path,
            )
            for tile in row
        ]
        for row in grid.tiles
    ]
