"""
Rotation arithmetic for tile exits.

Rotations are clockwise quarter turns stored in degrees (0, 90, 180, 270).
A single quarter turn maps up -> right -> down -> left -> up; every other
rotation is that step applied rotation // 90 times. The lookup table used on
the hot path is built from the single step, so the two always agree.
"""

from __future__ import annotations

from typing import Iterable

from grid_types import OPPOSITE, ConnectionPoints, Direction

VALID_ROTATIONS: tuple[int, ...] = (0, 90, 180, 270)

CLOCKWISE: dict[Direction, Direction] = {
    Direction.UP: Direction.RIGHT,
    Direction.RIGHT: Direction.DOWN,
    Direction.DOWN: Direction.LEFT,
    Direction.LEFT: Direction.UP,
}


def normalize_rotation(value: int) -> int:
    """
    Reduce a rotation to the range [0, 360).

    Raises:
        ValueError: If the value is not a whole number of quarter turns
    """
    if value % 90 != 0:
        raise ValueError(
            f"Invalid rotation: {value!r}\n"
            f"  Rotations must be multiples of 90 degrees (one of {VALID_ROTATIONS})"
        )
    return value % 360


def rotate_direction_90(direction: Direction) -> Direction:
    """Rotate a direction 90° clockwise."""
    return CLOCKWISE[direction]


def rotate_direction(direction: Direction, rotation: int) -> Direction:
    """Rotate a direction clockwise by applying the quarter turn repeatedly."""
    result = direction
    for _ in range(normalize_rotation(rotation) // 90):
        result = rotate_direction_90(result)
    return result


_ROTATION_TABLE: dict[tuple[Direction, int], Direction] = {
    (direction, rotation): rotate_direction(direction, rotation)
    for direction in Direction
    for rotation in VALID_ROTATIONS
}


def rotate_directions(exits: Iterable[Direction], rotation: int) -> tuple[Direction, ...]:
    """
    Return the directions a set of canonical exits occupy after rotation.

    Args:
        exits: Exit directions at rotation 0
        rotation: Clockwise rotation in degrees

    Returns:
        Rotated exits, in the same order as given
    """
    rotation = normalize_rotation(rotation)
    return tuple(_ROTATION_TABLE[(d, rotation)] for d in exits)


def opposite(direction: Direction) -> Direction:
    return OPPOSITE[direction]


def rotate_connection_points(points: ConnectionPoints, rotation: int) -> ConnectionPoints:
    """Rotate the edge-boolean form of a tile's exits clockwise."""
    result = points
    for _ in range(normalize_rotation(rotation) // 90):
        result = ConnectionPoints(
            left=result.bottom,
            right=result.top,
            top=result.left,
            bottom=result.right,
        )
    return result
