from __future__ import annotations

import math

from esper import World

from gridfall.config import GameConfig
from gridfall.constants import CORRUPTION_PUSHBACK
from gridfall.events.bus import EventBus, EVENT_CORRUPTION_RISE
from gridfall.systems.board_ops import get_board, get_game_state


class CorruptionSystem:
    """Rising hazard measured in rows from the floor.

    The height climbs with time and level, drops when the player removes a
    piece, and ends the game once it reaches a row holding any piece.
    """

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus

    @property
    def config(self) -> GameConfig:
        return getattr(self.world, "config")

    def advance(self, dt: float) -> float:
        state = get_game_state(self.world)
        rate = self.config.corruption_rate * state.level * dt
        state.corruption_level = min(self.config.max_corruption, max(0.0, state.corruption_level + rate))
        return state.corruption_level

    def push_back(self, amount: float = CORRUPTION_PUSHBACK) -> float:
        state = get_game_state(self.world)
        state.corruption_level = max(0.0, state.corruption_level - amount)
        return state.corruption_level

    def boundary_row(self) -> int | None:
        """Topmost row the corruption touches, or None while it is below one full row."""
        height = math.floor(get_game_state(self.world).corruption_level)
        if height <= 0:
            return None
        return self.config.rows - height - 1

    def collides(self) -> bool:
        boundary = self.boundary_row()
        if boundary is None:
            return False
        board = get_board(self.world)
        return any(y >= boundary for (_, y), _ in board.occupied_cells())

    def tick(self, dt: float) -> bool:
        """Advance, announce and report whether the corruption reached a piece."""
        level = self.advance(dt)
        if self.collides():
            return True
        self.event_bus.emit(EVENT_CORRUPTION_RISE, level=level)
        return False
