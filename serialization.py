"""
Plain-dict and JSON round-trip for puzzle value objects.

The shapes match the blobs stored by the session persistence layer:
camelCase top-level keys, positions as {"row": r, "col": c}, tile patterns
embedded in full.
"""

from __future__ import annotations

import json
from typing import Any

from grid_types import (
    CellType,
    ConnectionPoints,
    Direction,
    GridConfig,
    GridTile,
    MazeGrid,
    Position,
    ShapeCategory,
    TilePattern,
    in_bounds,
)
from rotation import normalize_rotation
from tile_patterns import get_tile_pattern_by_id

__all__ = [
    "dumps",
    "grid_config_from_dict",
    "grid_config_to_dict",
    "loads",
    "maze_from_dict",
    "maze_to_dict",
]


def _require(data: dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object for {context}, got {type(data).__name__}")
    if key not in data:
        raise ValueError(f"Missing key '{key}' in {context}")
    return data[key]


def _require_int(data: dict[str, Any], key: str, context: str) -> int:
    value = _require(data, key, context)
    if isinstance(value, bool):
        raise ValueError(f"'{key}' in {context} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{key}' in {context} must be an integer, got {value!r}") from exc


def _require_rows(data: dict[str, Any], key: str, size: int, context: str) -> list[list[Any]]:
    """The square row array stored under key, checked against gridSize."""
    rows = _require(data, key, context)
    if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
        raise ValueError(f"'{key}' in {context} must be a list of rows")
    if len(rows) != size or any(len(row) != size for row in rows):
        error_msg = (
            f"'{key}' array does not match gridSize {size}\n"
            f"  Got {len(rows)} rows with lengths {[len(row) for row in rows]}"
        )
        raise ValueError(error_msg)
    return rows


def _require_grid_size(data: dict[str, Any], context: str) -> int:
    size = _require_int(data, "gridSize", context)
    if size < 2:
        raise ValueError(f"'gridSize' in {context} must be at least 2, got {size}")
    return size


def position_to_dict(pos: Position) -> dict[str, int]:
    return {"row": pos.row, "col": pos.col}


def position_from_dict(data: dict[str, Any], context: str = "position") -> Position:
    return Position(_require_int(data, "row", context), _require_int(data, "col", context))


def _position_in_grid(data: dict[str, Any], key: str, size: int, context: str) -> Position:
    pos = position_from_dict(_require(data, key, context), key)
    if not in_bounds(pos, size):
        raise ValueError(
            f"'{key}' in {context} is outside the {size}x{size} grid: row {pos.row}, col {pos.col}"
        )
    return pos


# =============================================================================
# Path Finder
# =============================================================================


def pattern_to_dict(pattern: TilePattern) -> dict[str, Any]:
    points = pattern.connection_points
    return {
        "id": pattern.id,
        "pattern_name": pattern.name,
        "pattern_type": pattern.category.value,
        "arrow_directions": [d.value for d in pattern.exits],
        "connection_points": {
            "left": points.left,
            "right": points.right,
            "top": points.top,
            "bottom": points.bottom,
        },
        "difficulty_level": pattern.difficulty,
        "is_active": pattern.is_active,
    }


def pattern_from_dict(data: dict[str, Any]) -> TilePattern:
    """Resolve to the shared catalog entry when the id is known and unchanged."""
    context = "pattern"
    pattern_id = _require(data, "id", context)
    try:
        built = TilePattern(
            id=pattern_id,
            name=_require(data, "pattern_name", context),
            category=ShapeCategory(_require(data, "pattern_type", context)),
            exits=tuple(Direction(d) for d in _require(data, "arrow_directions", context)),
            difficulty=_require_int(data, "difficulty_level", context),
            is_active=bool(data.get("is_active", True)),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid pattern '{pattern_id}': {exc}") from exc

    if "connection_points" in data:
        raw = data["connection_points"]
        points = ConnectionPoints(
            left=bool(_require(raw, "left", "connection_points")),
            right=bool(_require(raw, "right", "connection_points")),
            top=bool(_require(raw, "top", "connection_points")),
            bottom=bool(_require(raw, "bottom", "connection_points")),
        )
        if points != built.connection_points:
            raise ValueError(
                f"Invalid pattern '{pattern_id}': connection_points {points} "
                f"disagree with arrow_directions {[d.value for d in built.exits]}"
            )

    known = get_tile_pattern_by_id(pattern_id)
    return known if known == built else built


def grid_config_to_dict(grid: GridConfig) -> dict[str, Any]:
    return {
        "tiles": [
            [
                {
                    "row": tile.row,
                    "col": tile.col,
                    "pattern": pattern_to_dict(tile.pattern),
                    "rotation": tile.rotation,
                }
                for tile in row
            ]
            for row in grid.tiles
        ],
        "gridSize": grid.grid_size,
        "startPosition": position_to_dict(grid.start_position),
        "endPosition": position_to_dict(grid.end_position),
        "optimalMoves": grid.optimal_moves,
    }


def grid_config_from_dict(data: dict[str, Any]) -> GridConfig:
    """
    Rebuild a GridConfig.

    Raises:
        ValueError: On missing keys, bad enum values, a tile grid that is
            not grid_size x grid_size, tiles labelled with a coordinate other
            than their slot, or endpoints off the grid
    """
    context = "grid config"
    size = _require_grid_size(data, context)
    rows = _require_rows(data, "tiles", size, context)

    tiles: list[list[GridTile]] = []
    for r, row in enumerate(rows):
        built_row: list[GridTile] = []
        for c, t in enumerate(row):
            tile_context = f"tiles[{r}][{c}]"
            tile = GridTile(
                row=_require_int(t, "row", tile_context),
                col=_require_int(t, "col", tile_context),
                pattern=pattern_from_dict(_require(t, "pattern", tile_context)),
                rotation=normalize_rotation(_require_int(t, "rotation", tile_context)),
            )
            if (tile.row, tile.col) != (r, c):
                raise ValueError(
                    f"Tile in {tile_context} is labelled row {tile.row}, col {tile.col}"
                )
            built_row.append(tile)
        tiles.append(built_row)

    start = _position_in_grid(data, "startPosition", size, context)
    end = _position_in_grid(data, "endPosition", size, context)
    if start == end:
        raise ValueError(f"'startPosition' and 'endPosition' in {context} are the same cell")

    return GridConfig(
        tiles=tiles,
        grid_size=size,
        start_position=start,
        end_position=end,
        optimal_moves=_require_int(data, "optimalMoves", context),
    )


# =============================================================================
# Key Finder
# =============================================================================


def maze_to_dict(maze: MazeGrid) -> dict[str, Any]:
    return {
        "cells": [[cell.value for cell in row] for row in maze.cells],
        "gridSize": maze.grid_size,
        "startPosition": position_to_dict(maze.start_position),
        "keyPosition": position_to_dict(maze.key_position),
        "exitPosition": position_to_dict(maze.exit_position),
        "optimalPathLength": maze.optimal_path_length,
    }


def maze_from_dict(data: dict[str, Any]) -> MazeGrid:
    """
    Rebuild a MazeGrid.

    The start, key and exit positions must lie on the grid and point at
    cells of the matching type.
    """
    context = "maze"
    size = _require_grid_size(data, context)
    rows = _require_rows(data, "cells", size, context)
    try:
        cells = [[CellType(value) for value in row] for row in rows]
    except ValueError as exc:
        raise ValueError(f"Invalid maze cell: {exc}") from exc

    marked: dict[str, Position] = {}
    for key, expected in (
        ("startPosition", CellType.START),
        ("keyPosition", CellType.KEY),
        ("exitPosition", CellType.EXIT),
    ):
        pos = _position_in_grid(data, key, size, context)
        found = cells[pos.row][pos.col]
        if found != expected:
            raise ValueError(
                f"'{key}' in {context} points at a {found.value} cell, expected {expected.value}"
            )
        marked[key] = pos

    return MazeGrid(
        cells=cells,
        grid_size=size,
        start_position=marked["startPosition"],
        key_position=marked["keyPosition"],
        exit_position=marked["exitPosition"],
        optimal_path_length=_require_int(data, "optimalPathLength", context),
    )


# =============================================================================
# JSON
# =============================================================================


def dumps(value: GridConfig | MazeGrid) -> str:
    match value:
        case GridConfig():
            return json.dumps(grid_config_to_dict(value))
        case MazeGrid():
            return json.dumps(maze_to_dict(value))
        case _:
            raise ValueError(f"Cannot serialize {type(value).__name__}")


def loads(text: str) -> GridConfig | MazeGrid:
    """Decode either blob; tiles mean a grid, cells mean a maze."""
    data = json.loads(text)
    if isinstance(data, dict) and "tiles" in data:
        return grid_config_from_dict(data)
    if isinstance(data, dict) and "cells" in data:
        return maze_from_dict(data)
    raise ValueError("JSON is neither a grid config nor a maze")
