"""
Shared type definitions for the puzzle engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class Direction(Enum):
    """Cardinal direction for exits and movement."""

    UP = "up"  # Decreasing row
    DOWN = "down"  # Increasing row
    LEFT = "left"  # Decreasing col
    RIGHT = "right"  # Increasing col


OPPOSITE: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


class RandomSource(Protocol):
    """Anything that can draw uniform integers and choices (e.g. random.Random)."""

    def randrange(self, stop: int) -> int: ...

    def choice(self, seq: Sequence[T]) -> T: ...


# =============================================================================
# Shared Geometry
# =============================================================================


@dataclass(frozen=True)
class Position:
    """A 0-indexed cell coordinate."""

    row: int
    col: int

    def step(self, direction: Direction) -> Position:
        dr, dc = OFFSETS[direction]
        return Position(self.row + dr, self.col + dc)


def in_bounds(pos: Position, size: int) -> bool:
    return 0 <= pos.row < size and 0 <= pos.col < size


# =============================================================================
# Path Finder Types
# =============================================================================


class ShapeCategory(Enum):
    """Tile shape, which also decides how a flip behaves."""

    STRAIGHT = "straight"
    CORNER = "corner"
    T_JUNCTION = "t_junction"
    CROSS = "cross"


@dataclass(frozen=True)
class ConnectionPoints:
    """Edge-boolean view of a tile's exits."""

    left: bool
    right: bool
    top: bool
    bottom: bool

    @classmethod
    def from_directions(cls, exits: Sequence[Direction]) -> ConnectionPoints:
        return cls(
            left=Direction.LEFT in exits,
            right=Direction.RIGHT in exits,
            top=Direction.UP in exits,
            bottom=Direction.DOWN in exits,
        )

    def to_directions(self) -> tuple[Direction, ...]:
        exits: list[Direction] = []
        if self.top:
            exits.append(Direction.UP)
        if self.bottom:
            exits.append(Direction.DOWN)
        if self.left:
            exits.append(Direction.LEFT)
        if self.right:
            exits.append(Direction.RIGHT)
        return tuple(exits)


@dataclass(frozen=True)
class TilePattern:
    """A catalog entry. Exits are canonical, i.e. at rotation 0."""

    id: str
    name: str
    category: ShapeCategory
    exits: tuple[Direction, ...]
    difficulty: int
    is_active: bool = True

    @property
    def connection_points(self) -> ConnectionPoints:
        return ConnectionPoints.from_directions(self.exits)


@dataclass(frozen=True)
class GridTile:
    """A live grid cell: shared pattern plus its own rotation."""

    row: int
    col: int
    pattern: TilePattern
    rotation: int = 0

    @property
    def position(self) -> Position:
        return Position(self.row, self.col)


@dataclass
class GridConfig:
    """A whole Path Finder puzzle. Tiles are replaced in place as the player acts."""

    tiles: list[list[GridTile]]
    grid_size: int
    start_position: Position
    end_position: Position
    optimal_moves: int

    def tile_at(self, pos: Position) -> GridTile:
        return self.tiles[pos.row][pos.col]

    def replace_tile(self, tile: GridTile) -> None:
        self.tiles[tile.row][tile.col] = tile

    def is_endpoint(self, pos: Position) -> bool:
        return pos == self.start_position or pos == self.end_position


# =============================================================================
# Key Finder Types
# =============================================================================


class CellType(Enum):
    """Maze cell tag."""

    EMPTY = "empty"
    WALL = "wall"
    START = "start"
    KEY = "key"
    EXIT = "exit"


TRAVERSABLE: frozenset[CellType] = frozenset(
    {CellType.EMPTY, CellType.KEY, CellType.EXIT, CellType.START}
)


@dataclass
class MazeGrid:
    """A Key Finder maze. Walls never change during play."""

    cells: list[list[CellType]]
    grid_size: int
    start_position: Position
    key_position: Position
    exit_position: Position
    optimal_path_length: int

    def cell_at(self, pos: Position) -> CellType:
        return self.cells[pos.row][pos.col]

    @property
    def wall_count(self) -> int:
        return sum(row.count(CellType.WALL) for row in self.cells)
