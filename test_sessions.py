"""Tests for sessions module."""

import pytest

from grid_parser import parse_maze, parse_tile_grid
from grid_types import Direction, Position
from keyfinder import Difficulty
from sessions import (
    LEVEL_SEQUENCE,
    KeyFinderSession,
    PathFinderSession,
    Phase,
    SeriesResult,
    SessionError,
    TileAction,
    next_level,
    summarize_series,
)

# Middle tile is a vertical straight; one quarter turn completes the row
ALMOST_SOLVED = "SV SV SV|SH SV SH|SV SV SV"

KEY_MAZE = """
S.K
##.
E..
"""


# =============================================================================
# Path Finder Sessions
# =============================================================================


class TestPathFinderSession:
    """Tests for applying tile actions to a grid."""

    def test_starts_unsolved(self) -> None:
        """A fresh session on an unsolved grid has no moves and is not complete."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        assert not session.is_completed
        assert not session.validation.is_valid
        assert session.total_moves == 0

    def test_rotate_solves(self) -> None:
        """One quarter turn of the middle tile completes the row."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        result = session.rotate(Position(1, 1))

        assert result.is_valid
        assert session.is_completed
        assert session.grid.tile_at(Position(1, 1)).rotation == 90
        assert session.total_moves == 1
        assert session.rotation_count == 1
        assert session.flip_count == 0

    def test_flip_solves(self) -> None:
        """Flipping a straight swaps its axis, which also completes the row."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        assert session.flip(Position(1, 1)).is_valid
        assert session.flip_count == 1
        assert session.rotation_count == 0

    def test_history(self) -> None:
        """Every action is recorded with its before and after rotation."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        session.rotate(Position(0, 0))
        session.flip(Position(0, 0))
        session.rotate(Position(1, 1))

        assert [h.move_number for h in session.history] == [1, 2, 3]
        assert [h.action_type for h in session.history] == [TileAction.ROTATE, TileAction.FLIP, TileAction.ROTATE]
        first, second, _ = session.history
        assert (first.tile_position, first.previous_rotation, first.new_rotation) == (Position(0, 0), 0, 90)
        assert (second.previous_rotation, second.new_rotation) == (90, 0)

    def test_endpoints_are_locked(self) -> None:
        """Start and end tiles cannot be rotated or flipped."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        with pytest.raises(SessionError, match="Start and end"):
            session.rotate(session.grid.start_position)
        with pytest.raises(SessionError, match="Start and end"):
            session.flip(session.grid.end_position)
        assert session.total_moves == 0

    def test_out_of_bounds(self) -> None:
        """Actions outside the grid are rejected."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        with pytest.raises(SessionError, match="outside"):
            session.rotate(Position(3, 0))

    def test_no_moves_after_completion(self) -> None:
        """A solved session accepts no more actions."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        session.rotate(Position(1, 1))
        with pytest.raises(SessionError, match="already completed"):
            session.rotate(Position(0, 0))

    def test_select(self) -> None:
        """Only in-bounds, non-endpoint tiles can be selected."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        assert not session.select(Position(1, 0))
        assert not session.select(Position(5, 5))
        assert session.selected is None
        assert session.select(Position(0, 2))
        assert session.selected == Position(0, 2)

    def test_overlays_follow_state(self) -> None:
        """Overlays pick up the selection and the solved path."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        session.select(Position(0, 0))
        assert not any(o.is_in_path for row in session.overlays() for o in row)

        session.rotate(Position(1, 1))
        overlays = session.overlays()
        assert [o.is_in_path for o in overlays[1]] == [True, True, True]
        assert overlays[0][0].is_selected

    def test_score(self) -> None:
        """The session scores with its own move count and budget."""
        session = PathFinderSession(parse_tile_grid(ALMOST_SOLVED))
        session.rotate(Position(1, 1))
        score = session.score(completion_time=45)
        assert score.time_bonus == 50
        assert score.move_penalty == 0
        assert score.final_score == 150
        assert score.efficiency == pytest.approx(300)  # optimal 3, one move


# =============================================================================
# Key Finder Sessions
# =============================================================================


class TestKeyFinderSession:
    """Tests for walking the token through a maze."""

    def test_initial_state(self) -> None:
        """The token starts on the start cell without the key."""
        session = KeyFinderSession(parse_maze(KEY_MAZE), Difficulty.EASY)
        assert session.player_position == Position(0, 0)
        assert not session.has_key
        assert session.phase == Phase.FINDING_KEY
        assert session.config.time_limit_seconds == 360

    def test_full_run(self) -> None:
        """Collecting the key and reaching the exit completes the maze."""
        session = KeyFinderSession(parse_maze(KEY_MAZE), "easy")
        for direction in (Direction.RIGHT, Direction.RIGHT):
            session.move(direction)
        assert session.has_key
        assert session.phase == Phase.FINDING_EXIT

        for direction in (Direction.DOWN, Direction.DOWN, Direction.LEFT, Direction.LEFT):
            session.move(direction)

        assert session.is_completed
        assert session.player_position == Position(2, 0)
        assert session.total_moves == 6
        assert session.restart_count == 0
        assert len(session.visited) == 7

    def test_wall_hit_restarts(self) -> None:
        """A wall hit costs a move and sends the token back to start."""
        session = KeyFinderSession(parse_maze(KEY_MAZE), Difficulty.EASY)
        record = session.move(Direction.DOWN)

        assert record.was_collision and record.caused_restart
        assert record.from_position == Position(0, 0)
        assert record.to_position == Position(0, 0)
        assert session.total_moves == 1
        assert session.restart_count == 1
        assert session.collision_count == 1

    def test_wall_hit_drops_key(self) -> None:
        """Leaving the grid counts as a wall: back to start, key lost."""
        session = KeyFinderSession(parse_maze(KEY_MAZE), Difficulty.EASY)
        session.move(Direction.RIGHT)
        session.move(Direction.RIGHT)
        assert session.has_key

        session.move(Direction.UP)
        assert not session.has_key
        assert session.phase == Phase.FINDING_KEY
        assert session.player_position == session.maze.start_position
        assert session.total_moves == 3

    def test_exit_without_key_does_not_finish(self) -> None:
        """Reaching the exit without the key is an ordinary move."""
        session = KeyFinderSession(parse_maze("SE.|...|..K"), Difficulty.EASY)
        session.move(Direction.RIGHT)
        assert session.player_position == Position(0, 1)
        assert not session.is_completed

    def test_moves_are_recorded(self) -> None:
        """Each move is recorded with its number, direction and outcome."""
        session = KeyFinderSession(parse_maze(KEY_MAZE), Difficulty.EASY)
        session.move(Direction.RIGHT)
        session.move(Direction.DOWN)
        assert [(m.move_number, m.direction, m.was_collision) for m in session.moves] == [
            (1, Direction.RIGHT, False),
            (2, Direction.DOWN, True),
        ]

    def test_no_moves_after_completion(self) -> None:
        """A completed maze accepts no more moves."""
        session = KeyFinderSession(parse_maze("SKE|...|..."), Difficulty.EASY)
        session.move(Direction.RIGHT)
        session.move(Direction.RIGHT)
        assert session.is_completed
        with pytest.raises(SessionError):
            session.move(Direction.DOWN)

    def test_score(self) -> None:
        """Restarts are charged in the score."""
        session = KeyFinderSession(parse_maze(KEY_MAZE), Difficulty.EASY)
        session.move(Direction.DOWN)  # restart
        for direction in (Direction.RIGHT, Direction.RIGHT, Direction.DOWN, Direction.DOWN, Direction.LEFT, Direction.LEFT):
            session.move(direction)

        score = session.score(completion_time=100)
        assert score.time_bonus == 50  # 260 s unused
        assert score.optimal_moves == 8
        assert score.actual_moves == 7
        assert score.move_penalty == 0
        assert score.restart_penalty == 20
        assert score.final_score == 1030


# =============================================================================
# Series
# =============================================================================


class TestSeries:
    """Tests for the three-tier Key Finder series."""

    def test_sequence(self) -> None:
        """Tiers run easy, medium, hard and stop after hard."""
        assert LEVEL_SEQUENCE == (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)
        assert next_level(Difficulty.EASY) == Difficulty.MEDIUM
        assert next_level("medium") == Difficulty.HARD
        assert next_level(Difficulty.HARD) is None

    def test_summary_totals(self) -> None:
        """Totals add up across tiers; an unfinished tier leaves the series incomplete."""
        results = [
            SeriesResult(Difficulty.EASY, 1100, 80, 20, True),
            SeriesResult(Difficulty.MEDIUM, 1000, 150, 35, True),
            SeriesResult(Difficulty.HARD, 0, 300, 0, False),
        ]
        summary = summarize_series(results)
        assert summary.total_score == 2100
        assert summary.total_time == 530
        assert summary.total_moves == 55
        assert summary.results == results
        assert not summary.completed

    def test_completed_series(self) -> None:
        """Clearing every tier completes the series."""
        results = [SeriesResult(level, 1000, 100, 10, True) for level in LEVEL_SEQUENCE]
        assert summarize_series(results).completed

    def test_empty_series(self) -> None:
        """An empty run totals zero and is not complete."""
        summary = summarize_series([])
        assert summary.total_score == 0
        assert not summary.completed
