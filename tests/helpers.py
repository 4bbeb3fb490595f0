from __future__ import annotations

import random
from typing import Iterable, Sequence, Tuple

from esper import World

from gridfall.config import GameConfig
from gridfall.constants import SHAPES_BY_NAME
from gridfall.systems.board_ops import add_piece
from gridfall.systems.game_engine import GameEngine
from gridfall.world import create_world

Cell = Tuple[int, int]


class FakeClock:
    def __init__(self, value: float = 0.0) -> None:
        self.value = value

    def advance(self, amount: float) -> None:
        self.value += amount

    def __call__(self) -> float:
        return self.value


def make_world(cols: int = 10, rows: int = 20, *, seed: int = 7) -> World:
    return create_world(GameConfig(cols=cols, rows=rows, spawn_chance=0.0), rng=random.Random(seed))


def put(world: World, cells: Iterable[Cell], *, shape: str = "I", color: str = "#123456") -> int:
    """Add a piece with explicit cells, bypassing shape offsets."""
    return add_piece(world, SHAPES_BY_NAME[shape], color, list(cells))


def row_cells(y: int, xs: Sequence[int]) -> list[Cell]:
    return [(x, y) for x in xs]


def make_engine(
    *,
    cols: int = 10,
    rows: int = 20,
    seed: int = 11,
    clock: FakeClock | None = None,
    **config,
) -> GameEngine:
    config.setdefault("spawn_chance", 0.0)
    return GameEngine(
        GameConfig(cols=cols, rows=rows, **config),
        rng=random.Random(seed),
        clock=clock,
    )


def drive(engine: GameEngine, seconds: float, dt: float = 0.05) -> None:
    steps = int(round(seconds / dt))
    for _ in range(steps):
        engine.update(dt)
