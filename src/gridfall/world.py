import random

from esper import World

from gridfall.components.board import Board
from gridfall.components.game_state import GameState
from gridfall.config import GameConfig


def create_world(
    config: GameConfig | None = None,
    *,
    level: int = 1,
    now: float = 0.0,
    rng: random.Random | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "config", config or GameConfig())
    populate_world(world, level=level, now=now)
    return world


def recreate_world(world: World, *, level: int = 1, now: float = 0.0) -> None:
    """Wipe every entity and rebuild the board and state resources in place.

    ``clear_database`` also rewinds the entity counter, so piece ids restart
    for the new level while systems keep their reference to the same World.
    """
    world.clear_database()
    populate_world(world, level=level, now=now)


def populate_world(world: World, *, level: int = 1, now: float = 0.0) -> None:
    config: GameConfig = getattr(world, "config")
    # Board and state resources are created before any piece so they never
    # interleave with piece ids handed out later.
    world.create_entity(Board(rows=config.rows, cols=config.cols))
    world.create_entity(
        GameState(
            level=level,
            time_remaining=config.time_limit,
            last_move_time=now,
        )
    )
