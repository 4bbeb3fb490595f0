from __future__ import annotations

from dataclasses import dataclass

from gridfall.constants import (
    BOARD_COLS,
    BOARD_ROWS,
    CORRUPTION_HEADROOM,
    CORRUPTION_RATE,
    SPAWN_CHANCE,
    SPAWN_MARGIN,
    TIME_LIMIT,
)


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Per-engine settings; board size is fixed for the lifetime of an engine.

    Cell size and other presentation values belong to the renderer and are not
    part of this configuration.
    """
    cols: int = BOARD_COLS
    rows: int = BOARD_ROWS
    time_limit: float = TIME_LIMIT
    spawn_chance: float = SPAWN_CHANCE
    corruption_rate: float = CORRUPTION_RATE

    def __post_init__(self) -> None:
        if self.rows <= CORRUPTION_HEADROOM:
            raise ValueError(f"rows must exceed {CORRUPTION_HEADROOM}, got {self.rows}")
        if self.cols <= SPAWN_MARGIN:
            raise ValueError(f"cols must exceed {SPAWN_MARGIN}, got {self.cols}")
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")
        if self.spawn_chance < 0 or self.corruption_rate < 0:
            raise ValueError("spawn_chance and corruption_rate must be non-negative")

    @property
    def max_corruption(self) -> float:
        return float(self.rows - CORRUPTION_HEADROOM)
