"""
Demonstration script for the Path Finder and Key Finder engines.

Usage:
    python demo.py [pathfinder|keyfinder|all] [seed]
"""

import logging
import random
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_maze, render_tile_grid
from grid_parser import parse_tile_grid
from grid_types import Direction, Position
from keyfinder import Difficulty, find_path, generate_maze, get_difficulty_config
from pathfinder import generate_grid, validate_path
from sessions import KeyFinderSession, PathFinderSession

console = Console()


def pathfinder_demo(rng: random.Random) -> None:
    """Generate a random grid, then solve a hand-built one move by move."""
    grid = generate_grid(5, 2, rng)
    result = validate_path(grid)

    status = Text()
    status.append(Text.from_ansi(render_tile_grid(grid, result.path_tiles)))
    status.append("\n\n")
    status.append("Optimal moves: ", style="bold")
    status.append(f"{grid.optimal_moves}\n")
    status.append("Validation: ", style="bold")
    status.append(result.message, style="green" if result.is_valid else "red")
    console.print(Panel(status, title="Random Path Finder grid", border_style="green", width=80))

    # The middle tile is a quarter turn away from completing the route
    grid = parse_tile_grid("SV SH SV|SH SV SH|CTR SH SV")
    session = PathFinderSession(grid)
    steps = Text()
    validation = session.rotate(Position(1, 1))
    steps.append(f"rotate 1,1 -> {validation.message}\n")
    steps.append("\n")
    steps.append(Text.from_ansi(render_tile_grid(session.grid, session.validation.path_tiles)))
    score = session.score(completion_time=42)
    steps.append("\n\nScore: ", style="bold")
    steps.append(f"{score.final_score} (bonus {score.time_bonus}, penalty {score.move_penalty})")
    console.print(Panel(steps, title="Hand-built Path Finder grid", border_style="green", width=80))


def keyfinder_demo(rng: random.Random) -> None:
    """Generate one maze per tier, then walk the shortest route through an easy one."""
    for difficulty in Difficulty:
        maze = generate_maze(difficulty, rng)
        config = get_difficulty_config(difficulty)
        body = Text()
        body.append(Text.from_ansi(render_maze(maze)))
        body.append("\n\n")
        body.append("Walls: ", style="bold")
        body.append(f"{maze.wall_count}  ")
        body.append("Optimal path: ", style="bold")
        body.append(f"{maze.optimal_path_length}  ")
        body.append("Time limit: ", style="bold")
        body.append(f"{config.time_limit_seconds}s")
        console.print(Panel(body, title=f"Key Finder - {difficulty.value}", border_style="cyan", width=80))

    maze = generate_maze(Difficulty.EASY, rng)
    session = KeyFinderSession(maze, Difficulty.EASY)
    route = find_path(maze.cells, maze.start_position, maze.key_position)
    route += find_path(maze.cells, maze.key_position, maze.exit_position)[1:]
    for here, there in zip(route, route[1:]):
        direction = next(d for d in Direction if here.step(d) == there)
        session.move(direction)

    body = Text()
    body.append(Text.from_ansi(render_maze(maze, session.player_position, session.has_key)))
    score = session.score(completion_time=90)
    body.append("\n\nCompleted: ", style="bold")
    body.append(f"{session.is_completed} in {session.total_moves} moves, score {score.final_score}")
    console.print(Panel(body, title="Key Finder walkthrough", border_style="cyan", width=80))


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

    which = sys.argv[1] if len(sys.argv) > 1 else "all"
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else None
    rng = random.Random(seed)

    if which in ("pathfinder", "all"):
        pathfinder_demo(rng)
    if which in ("keyfinder", "all"):
        keyfinder_demo(rng)
