"""
In-memory game sessions for Path Finder and Key Finder.

Sessions apply player actions to a puzzle, keep the move counters and an
audit trail of every move, and score the result. Timers and persistence stay
with the caller: completion time is passed in when scoring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from grid_types import CellType, Direction, GridConfig, MazeGrid, Position, in_bounds
from keyfinder import (
    Difficulty,
    MazeScoreResult,
    can_move,
    get_difficulty_config,
)
from keyfinder import calculate_score as calculate_maze_score
from pathfinder import (
    DEFAULT_TIME_LIMIT,
    PathValidationResult,
    ScoreCalculation,
    TileOverlay,
    calculate_score,
    compute_overlays,
    flip_tile,
    rotate_tile,
    validate_path,
)

logger = logging.getLogger(__name__)


class SessionError(ValueError):
    """An action the session cannot accept."""

    pass


# =============================================================================
# Path Finder
# =============================================================================


class TileAction(Enum):
    ROTATE = "rotate"
    FLIP = "flip"


@dataclass(frozen=True)
class MoveHistory:
    """One rotate/flip, as recorded for the audit log."""

    move_number: int
    tile_position: Position
    action_type: TileAction
    previous_rotation: int
    new_rotation: int


class PathFinderSession:
    """A Path Finder game in progress."""

    def __init__(self, grid: GridConfig, time_limit: int = DEFAULT_TIME_LIMIT) -> None:
        self.grid = grid
        self.time_limit = time_limit
        self.total_moves = 0
        self.rotation_count = 0
        self.flip_count = 0
        self.selected: Position | None = None
        self.history: list[MoveHistory] = []
        self.validation: PathValidationResult = validate_path(grid)
        self.is_completed = self.validation.is_valid

    def select(self, position: Position) -> bool:
        """Select a tile. Start and end tiles cannot be selected."""
        if not in_bounds(position, self.grid.grid_size) or self.grid.is_endpoint(position):
            return False
        self.selected = position
        return True

    def rotate(self, position: Position) -> PathValidationResult:
        return self._apply(position, TileAction.ROTATE)

    def flip(self, position: Position) -> PathValidationResult:
        return self._apply(position, TileAction.FLIP)

    def _apply(self, position: Position, action: TileAction) -> PathValidationResult:
        if self.is_completed:
            raise SessionError("Session already completed")
        if not in_bounds(position, self.grid.grid_size):
            raise SessionError(f"Position {position} is outside the {self.grid.grid_size}x{self.grid.grid_size} grid")
        if self.grid.is_endpoint(position):
            raise SessionError(f"Start and end tiles cannot be changed: {position}")

        tile = self.grid.tile_at(position)
        if action is TileAction.ROTATE:
            changed = rotate_tile(tile)
            self.rotation_count += 1
        else:
            changed = flip_tile(tile)
            self.flip_count += 1
        self.grid.replace_tile(changed)

        self.total_moves += 1
        self.history.append(
            MoveHistory(self.total_moves, position, action, tile.rotation, changed.rotation)
        )

        self.validation = validate_path(self.grid)
        if self.validation.is_valid:
            self.is_completed = True
            logger.info("Path Finder solved in %d moves", self.total_moves)
        return self.validation

    def overlays(self) -> list[list[TileOverlay]]:
        return compute_overlays(self.grid, self.validation.path_tiles, self.selected)

    def score(self, completion_time: float) -> ScoreCalculation:
        return calculate_score(completion_time, self.time_limit, self.total_moves, self.grid.optimal_moves)


# =============================================================================
# Key Finder
# =============================================================================


class Phase(Enum):
    FINDING_KEY = "finding_key"
    FINDING_EXIT = "finding_exit"


@dataclass(frozen=True)
class MoveRecord:
    """One token move, as recorded for the audit log."""

    move_number: int
    from_position: Position
    to_position: Position
    direction: Direction
    was_collision: bool
    caused_restart: bool


class KeyFinderSession:
    """
    A Key Finder game in progress.

    Hitting a wall (or the grid edge) sends the token back to the start and
    drops the key, so it has to be collected again.
    """

    def __init__(self, maze: MazeGrid, difficulty: Difficulty | str) -> None:
        self.maze = maze
        self.difficulty = Difficulty(difficulty)
        self.config = get_difficulty_config(self.difficulty)
        self.player_position = maze.start_position
        self.has_key = False
        self.total_moves = 0
        self.restart_count = 0
        self.collision_count = 0
        self.is_completed = False
        self.visited: set[Position] = {maze.start_position}
        self.moves: list[MoveRecord] = []

    @property
    def phase(self) -> Phase:
        return Phase.FINDING_EXIT if self.has_key else Phase.FINDING_KEY

    def move(self, direction: Direction) -> MoveRecord:
        if self.is_completed:
            raise SessionError("Session already completed")

        origin = self.player_position
        check = can_move(origin, direction, self.maze)
        self.total_moves += 1

        if check.hit_wall or check.new_position is None:
            self.collision_count += 1
            self.restart_count += 1
            self.has_key = False
            self.player_position = self.maze.start_position
            record = MoveRecord(self.total_moves, origin, self.maze.start_position, direction, True, True)
            self.moves.append(record)
            logger.debug("Key Finder: wall hit at %s going %s, restarting", origin, direction.value)
            return record

        self.player_position = check.new_position
        self.visited.add(check.new_position)
        cell = self.maze.cell_at(check.new_position)
        if cell == CellType.KEY:
            self.has_key = True
        elif cell == CellType.EXIT and self.has_key:
            self.is_completed = True
            logger.info(
                "Key Finder %s completed in %d moves with %d restart(s)",
                self.difficulty.value,
                self.total_moves,
                self.restart_count,
            )

        record = MoveRecord(self.total_moves, origin, check.new_position, direction, False, False)
        self.moves.append(record)
        return record

    def score(self, completion_time: float) -> MazeScoreResult:
        return calculate_maze_score(
            completion_time,
            self.config.time_limit_seconds,
            self.total_moves,
            self.maze.optimal_path_length,
            self.restart_count,
        )


# =============================================================================
# Key Finder Series
# =============================================================================


LEVEL_SEQUENCE: tuple[Difficulty, ...] = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)


@dataclass(frozen=True)
class SeriesResult:
    level: Difficulty
    score: int
    time_taken: float
    moves: int
    completed: bool


@dataclass(frozen=True)
class SeriesSummary:
    total_score: int
    total_time: float
    total_moves: int
    results: list[SeriesResult] = field(default_factory=list)
    completed: bool = False


def next_level(level: Difficulty | str) -> Difficulty | None:
    """The tier after this one, or None after the last."""
    idx = LEVEL_SEQUENCE.index(Difficulty(level))
    return LEVEL_SEQUENCE[idx + 1] if idx + 1 < len(LEVEL_SEQUENCE) else None


def summarize_series(results: Sequence[SeriesResult]) -> SeriesSummary:
    """
    Total up a run through the tiers.

    The series counts as completed only when every tier in LEVEL_SEQUENCE was
    cleared.
    """
    cleared = {r.level for r in results if r.completed}
    return SeriesSummary(
        total_score=sum(r.score for r in results),
        total_time=sum(r.time_taken for r in results),
        total_moves=sum(r.moves for r in results),
        results=list(results),
        completed=all(level in cleared for level in LEVEL_SEQUENCE),
    )
