"""
Key Finder engine: maze generation, move checks and scoring.

A maze is a square of cells with hidden walls. The player walks from the
start cell to the key and then to the exit. Generation scatters walls at
random and keeps trying until both legs are reachable, falling back to a
wall-free maze when the attempt budget runs out, so callers never receive an
unsolvable maze.
"""

from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum

from grid_types import (
    TRAVERSABLE,
    CellType,
    Direction,
    MazeGrid,
    Position,
    RandomSource,
    in_bounds,
)

logger = logging.getLogger(__name__)


class Difficulty(Enum):
    """Maze tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultyConfig:
    """Per-tier maze settings."""

    grid_size: int
    wall_density: float
    time_limit_seconds: int
    optimal_moves_multiplier: float


DIFFICULTY_CONFIGS: dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(8, 0.20, 360, 1.3),
    Difficulty.MEDIUM: DifficultyConfig(10, 0.28, 300, 1.5),
    Difficulty.HARD: DifficultyConfig(12, 0.33, 240, 1.7),
}


@dataclass(frozen=True)
class MazeRules:
    """Retry budgets for maze generation."""

    max_attempts: int = 50
    max_placement_attempts: int = 100


@dataclass(frozen=True)
class MoveCheck:
    """Answer to 'may the token step this way?'."""

    can_move: bool
    new_position: Position | None
    hit_wall: bool


@dataclass(frozen=True)
class MazeScoreResult:
    """Key Finder score breakdown."""

    base_score: int
    time_bonus: int
    move_penalty: int
    restart_penalty: int
    final_score: int
    efficiency: float
    optimal_moves: int
    actual_moves: int


def get_difficulty_config(difficulty: Difficulty | str) -> DifficultyConfig:
    """
    Look up the settings for a tier, given as enum or its string value.

    Raises:
        ValueError: If the tier is unknown
    """
    return DIFFICULTY_CONFIGS[Difficulty(difficulty)]


# =============================================================================
# Search
# =============================================================================


def _neighbors(pos: Position, size: int) -> list[Position]:
    candidates = [pos.step(d) for d in (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)]
    return [p for p in candidates if in_bounds(p, size)]


def find_path(cells: list[list[CellType]], start: Position, end: Position) -> list[Position]:
    """
    Return the shortest path from start to end using BFS.

    Returns a list of positions including both endpoints, or an empty list if
    no path exists.
    """
    size = len(cells)
    visited = [[False] * size for _ in range(size)]
    visited[start.row][start.col] = True
    queue: deque[tuple[Position, list[Position]]] = deque([(start, [start])])

    while queue:
        pos, path = queue.popleft()
        if pos == end:
            return path

        for nxt in _neighbors(pos, size):
            if visited[nxt.row][nxt.col]:
                continue
            if cells[nxt.row][nxt.col] not in TRAVERSABLE:
                continue
            visited[nxt.row][nxt.col] = True
            queue.append((nxt, path + [nxt]))

    return []


def is_valid_maze(maze: MazeGrid) -> bool:
    """True when start, key and exit are distinct cells and both legs are reachable."""
    if len({maze.start_position, maze.key_position, maze.exit_position}) != 3:
        return False
    if not find_path(maze.cells, maze.start_position, maze.key_position):
        return False
    return bool(find_path(maze.cells, maze.key_position, maze.exit_position))


# =============================================================================
# Generation
# =============================================================================


def find_random_empty_position(
    cells: list[list[CellType]],
    exclude: list[Position],
    rng: RandomSource,
    max_attempts: int = 100,
) -> Position:
    """
    Pick an empty cell not in exclude.

    Samples at random up to max_attempts times, then scans row-major for the
    first qualifying cell. Falls back to (0, 0) when the grid has no empty
    cell at all.
    """
    size = len(cells)

    def usable(pos: Position) -> bool:
        return cells[pos.row][pos.col] == CellType.EMPTY and pos not in exclude

    for _ in range(max_attempts):
        pos = Position(rng.randrange(size), rng.randrange(size))
        if usable(pos):
            return pos

    for row in range(size):
        for col in range(size):
            pos = Position(row, col)
            if usable(pos):
                return pos

    return Position(0, 0)


def create_maze_attempt(
    grid_size: int,
    wall_density: float,
    rng: RandomSource,
    rules: MazeRules = MazeRules(),
) -> MazeGrid:
    """
    Lay out one random maze. The result may be unsolvable; see is_valid_maze.

    Wall draws that land on an existing wall are skipped rather than redrawn,
    so the final wall count can fall slightly short of the target.
    """
    cells = [[CellType.EMPTY] * grid_size for _ in range(grid_size)]

    wall_count = math.floor(grid_size * grid_size * wall_density)
    for _ in range(wall_count):
        row = rng.randrange(grid_size)
        col = rng.randrange(grid_size)
        if cells[row][col] == CellType.EMPTY:
            cells[row][col] = CellType.WALL

    start = Position(grid_size // 2, 0)
    key = find_random_empty_position(cells, [start], rng, rules.max_placement_attempts)
    exit_ = find_random_empty_position(cells, [start, key], rng, rules.max_placement_attempts)

    cells[start.row][start.col] = CellType.START
    cells[key.row][key.col] = CellType.KEY
    cells[exit_.row][exit_.col] = CellType.EXIT

    path_to_key = find_path(cells, start, key)
    path_to_exit = find_path(cells, key, exit_)

    return MazeGrid(
        cells=cells,
        grid_size=grid_size,
        start_position=start,
        key_position=key,
        exit_position=exit_,
        optimal_path_length=len(path_to_key) + len(path_to_exit),
    )


def create_simple_maze(grid_size: int) -> MazeGrid:
    """A wall-free maze with start, key and exit in a line on the middle row."""
    cells = [[CellType.EMPTY] * grid_size for _ in range(grid_size)]
    middle = grid_size // 2

    start = Position(middle, 0)
    key = Position(middle, middle)
    exit_ = Position(middle, grid_size - 1)

    cells[start.row][start.col] = CellType.START
    cells[key.row][key.col] = CellType.KEY
    cells[exit_.row][exit_.col] = CellType.EXIT

    return MazeGrid(
        cells=cells,
        grid_size=grid_size,
        start_position=start,
        key_position=key,
        exit_position=exit_,
        optimal_path_length=grid_size,
    )


def generate_maze(
    difficulty: Difficulty | str,
    rng: RandomSource | None = None,
    rules: MazeRules | None = None,
) -> MazeGrid:
    """
    Generate a solvable maze for the given tier.

    Args:
        difficulty: Tier, as enum or string ("easy", "medium", "hard")
        rng: Random source (a fresh random.Random when omitted)
        rules: Retry budgets (defaults to MazeRules())

    Returns:
        The first valid random maze, or the simple maze if every attempt failed
    """
    config = get_difficulty_config(difficulty)
    if rng is None:
        rng = random.Random()
    if rules is None:
        rules = MazeRules()

    for attempt in range(1, rules.max_attempts + 1):
        maze = create_maze_attempt(config.grid_size, config.wall_density, rng, rules)
        if is_valid_maze(maze):
            logger.debug(
                "generate_maze: %s maze valid after %d attempt(s), walls=%d, optimal=%d",
                Difficulty(difficulty).value,
                attempt,
                maze.wall_count,
                maze.optimal_path_length,
            )
            return maze

    logger.warning(
        "generate_maze: no valid %s maze in %d attempts, using simple layout",
        Difficulty(difficulty).value,
        rules.max_attempts,
    )
    return create_simple_maze(config.grid_size)


# =============================================================================
# Movement and Scoring
# =============================================================================


def can_move(current: Position, direction: Direction, maze: MazeGrid) -> MoveCheck:
    """
    Check a single step. Leaving the grid counts as hitting a wall.

    Nothing is mutated; the caller decides what a wall hit costs.
    """
    target = current.step(direction)
    if not in_bounds(target, maze.grid_size):
        return MoveCheck(False, None, True)
    if maze.cell_at(target) == CellType.WALL:
        return MoveCheck(False, None, True)
    return MoveCheck(True, target, False)


def calculate_score(
    completion_time: float,
    time_limit: float,
    total_moves: int,
    optimal_moves: int,
    restart_count: int,
) -> MazeScoreResult:
    """Score a finished maze."""
    base_score = 1000

    time_used = time_limit - completion_time
    if time_used < 60:
        time_bonus = 200
    elif time_used < 120:
        time_bonus = 150
    elif time_used < 180:
        time_bonus = 100
    else:
        time_bonus = 50

    move_penalty = max(0, total_moves - optimal_moves) * 5
    restart_penalty = restart_count * 20
    final_score = max(base_score + time_bonus - move_penalty - restart_penalty, 50)

    # Unlike Path Finder, a missing denominator scores 0 here
    if optimal_moves > 0 and total_moves > 0:
        efficiency = optimal_moves / total_moves * 100
    else:
        efficiency = 0.0

    return MazeScoreResult(
        base_score=base_score,
        time_bonus=time_bonus,
        move_penalty=move_penalty,
        restart_penalty=restart_penalty,
        final_score=final_score,
        efficiency=efficiency,
        optimal_moves=optimal_moves,
        actual_moves=total_moves,
    )
