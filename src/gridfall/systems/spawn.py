from __future__ import annotations

import random

from esper import World

from gridfall.config import GameConfig
from gridfall.constants import MAX_PIECES, PALETTE, SHAPES, SPAWN_MARGIN
from gridfall.events.bus import EventBus, EVENT_NEW_PIECE_SPAWNED
from gridfall.systems.board_ops import get_game_state, piece_count, place_piece
from gridfall.systems.gravity import resolve_gravity


class SpawnSystem:
    """Drops occasional new pieces in from the top row during play."""

    def __init__(self, world: World, event_bus: EventBus, *, rng: random.Random | None = None) -> None:
        self.world = world
        self.event_bus = event_bus
        candidate_rng = rng or getattr(world, "random", None)
        self._rng: random.Random = candidate_rng or random.Random()

    def should_spawn(self) -> bool:
        config: GameConfig = getattr(self.world, "config")
        if piece_count(self.world) >= MAX_PIECES:
            return False
        chance = config.spawn_chance * get_game_state(self.world).level
        return self._rng.random() < chance

    def spawn(self) -> int | None:
        """Place a random piece on row 0 and settle the board.

        Returns None when the piece does not fit, which the caller treats as a
        blocked board.
        """
        config: GameConfig = getattr(self.world, "config")
        shape = self._rng.choice(SHAPES)
        x = self._rng.randrange(config.cols - SPAWN_MARGIN)
        color = PALETTE[self._rng.randrange(len(PALETTE))]
        piece_id = place_piece(self.world, shape, color, x, 0)
        if piece_id is None:
            return None
        self.event_bus.emit(EVENT_NEW_PIECE_SPAWNED, piece_id=piece_id)
        resolve_gravity(self.world)
        return piece_id
