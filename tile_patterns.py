"""
The fixed catalog of Path Finder tile shapes.
"""

from __future__ import annotations

import random

from grid_types import Direction, RandomSource, ShapeCategory, TilePattern

__all__ = [
    "TILE_PATTERNS",
    "get_random_tile_pattern",
    "get_tile_pattern_by_id",
    "get_tile_patterns_by_difficulty",
]

UP, DOWN, LEFT, RIGHT = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT

TILE_PATTERNS: tuple[TilePattern, ...] = (
    TilePattern("straight_horizontal", "Straight Horizontal", ShapeCategory.STRAIGHT, (RIGHT, LEFT), 1),
    TilePattern("straight_vertical", "Straight Vertical", ShapeCategory.STRAIGHT, (DOWN, UP), 1),
    TilePattern("corner_top_right", "Corner Top Right", ShapeCategory.CORNER, (UP, RIGHT), 1),
    TilePattern("corner_top_left", "Corner Top Left", ShapeCategory.CORNER, (UP, LEFT), 1),
    TilePattern("corner_bottom_right", "Corner Bottom Right", ShapeCategory.CORNER, (DOWN, RIGHT), 1),
    TilePattern("corner_bottom_left", "Corner Bottom Left", ShapeCategory.CORNER, (DOWN, LEFT), 1),
    TilePattern("t_junction_top", "T-Junction Top", ShapeCategory.T_JUNCTION, (LEFT, RIGHT, DOWN), 2),
    TilePattern("t_junction_bottom", "T-Junction Bottom", ShapeCategory.T_JUNCTION, (LEFT, RIGHT, UP), 2),
    TilePattern("t_junction_left", "T-Junction Left", ShapeCategory.T_JUNCTION, (UP, DOWN, RIGHT), 2),
    TilePattern("t_junction_right", "T-Junction Right", ShapeCategory.T_JUNCTION, (UP, DOWN, LEFT), 2),
    TilePattern("cross", "Cross", ShapeCategory.CROSS, (UP, DOWN, LEFT, RIGHT), 3),
)

_BY_ID: dict[str, TilePattern] = {p.id: p for p in TILE_PATTERNS}


def get_tile_patterns_by_difficulty(max_difficulty: int) -> list[TilePattern]:
    """Active patterns whose tier is at most max_difficulty."""
    return [p for p in TILE_PATTERNS if p.difficulty <= max_difficulty and p.is_active]


def get_tile_pattern_by_id(pattern_id: str) -> TilePattern | None:
    return _BY_ID.get(pattern_id)


def get_random_tile_pattern(max_difficulty: int, rng: RandomSource | None = None) -> TilePattern:
    """
    Draw one pattern uniformly from the active patterns up to max_difficulty.

    Raises:
        ValueError: If no pattern qualifies
    """
    available = get_tile_patterns_by_difficulty(max_difficulty)
    if not available:
        raise ValueError(f"No active tile patterns with difficulty <= {max_difficulty}")
    if rng is None:
        rng = random.Random()
    return rng.choice(available)
