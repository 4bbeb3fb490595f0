from __future__ import annotations

import logging
import random
from typing import Callable

from gridfall.config import GameConfig
from gridfall.constants import CASCADE_DELAY, LEVEL_ADVANCE_DELAY
from gridfall.events.bus import (
    EventBus,
    EVENT_GAME_OVER,
    EVENT_LEVEL_COMPLETE,
    EVENT_LEVEL_GENERATED,
    EVENT_PIECE_REMOVED,
    EVENT_PIECE_SELECTED,
    EVENT_TIME_UPDATE,
)
from gridfall.systems.board_ops import delete_piece, get_game_state, get_piece, piece_count
from gridfall.systems.cascade import CascadeSystem
from gridfall.systems.corruption import CorruptionSystem
from gridfall.systems.level_generator import LevelGenerator, LevelLayout
from gridfall.systems.scoring import ScoringSystem
from gridfall.systems.spawn import SpawnSystem
from gridfall.utils.scheduler import TaskQueue
from gridfall.utils.snapshot import GameSnapshot, take_snapshot
from gridfall.world import create_world, recreate_world

logger = logging.getLogger(__name__)

CASCADE_TASK = "cascade"
LEVEL_ADVANCE_TASK = "level_advance"


class GameEngine:
    """Owns the world and wires the board systems behind the public game contract.

    Time is simulated: the engine clock is the task queue timeline, advanced only
    by ``update(dt)``, unless a host injects its own ``clock``.

    The host drives two inputs: ``select_piece`` for player clicks and
    ``update(dt)`` once per frame. Removing a piece finishes synchronously and
    schedules the cascade on the task queue, which ``update`` drains, so one
    frame never carries the whole cascade. While the cascade is pending,
    selection is ignored.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self.event_bus = event_bus or EventBus()
        self.tasks = TaskQueue()
        self.clock = clock or self._elapsed
        self.world = create_world(self.config, now=self.clock(), rng=rng)
        self.scoring = ScoringSystem(self.world, self.event_bus, clock=self.clock)
        self.cascade = CascadeSystem(self.world, self.event_bus, self.scoring)
        self.corruption = CorruptionSystem(self.world, self.event_bus)
        self.spawner = SpawnSystem(self.world, self.event_bus)
        self.level_generator = LevelGenerator(self.world)

    def _elapsed(self) -> float:
        return self.tasks.now

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_state(self) -> GameSnapshot:
        return take_snapshot(self.world)

    # ------------------------------------------------------------------
    # Player input
    # ------------------------------------------------------------------
    def select_piece(self, piece_id: int | None) -> None:
        state = get_game_state(self.world)
        if state.animating or state.processing_cascades or state.game_over:
            return
        if piece_id is not None and get_piece(self.world, piece_id) is None:
            return
        if piece_id == state.selected:
            self.remove_piece(piece_id)
            return
        state.selected = piece_id
        self.event_bus.emit(EVENT_PIECE_SELECTED, piece_id=piece_id)

    def remove_piece(self, piece_id: int | None) -> None:
        state = get_game_state(self.world)
        if piece_id is None or state.animating or state.processing_cascades or state.game_over:
            return
        piece = get_piece(self.world, piece_id)
        if piece is None:
            return
        state.animating = True
        gain = self.scoring.score_removal(len(piece.cells))
        delete_piece(self.world, piece_id)
        state.moves += 1
        state.selected = None
        self.corruption.push_back()
        self.event_bus.emit(EVENT_PIECE_REMOVED, piece_id=piece_id, moves=state.moves, score=gain)
        state.animating = False
        state.processing_cascades = True
        self.tasks.schedule(CASCADE_DELAY, self._run_cascades, label=CASCADE_TASK)

    # ------------------------------------------------------------------
    # Frame tick
    # ------------------------------------------------------------------
    def update(self, dt: float) -> None:
        self.tasks.advance(dt)
        state = get_game_state(self.world)
        if state.game_over:
            return
        state.time_remaining = max(0.0, state.time_remaining - dt)
        if state.time_remaining <= 0:
            self._game_over("time_up")
            return
        self.scoring.decay_combo()
        if self.corruption.tick(dt):
            self._game_over("corruption")
            return
        if not self.tasks.pending(LEVEL_ADVANCE_TASK) and self.spawner.should_spawn():
            if self.spawner.spawn() is None:
                self._game_over("board_full")
                return
        self.event_bus.emit(
            EVENT_TIME_UPDATE,
            time_remaining=state.time_remaining,
            corruption_level=state.corruption_level,
        )

    # ------------------------------------------------------------------
    # Level flow
    # ------------------------------------------------------------------
    def generate_level(self) -> LevelLayout:
        level = get_game_state(self.world).level
        self._recreate(level)
        layout = self.level_generator.generate(level)
        self.event_bus.emit(
            EVENT_LEVEL_GENERATED,
            level=level,
            gaps=list(layout.gaps),
            piece_count=piece_count(self.world),
        )
        return layout

    def set_level(self, level: int) -> None:
        get_game_state(self.world).level = max(1, int(level))

    def reset(self) -> LevelLayout:
        self._recreate(1)
        return self.generate_level()

    def start_new_game(self) -> LevelLayout:
        return self.reset()

    def _recreate(self, level: int) -> None:
        self.tasks.clear()
        recreate_world(self.world, level=level, now=self.clock())

    def _run_cascades(self) -> None:
        state = get_game_state(self.world)
        if not state.game_over:
            self.cascade.run()
        state.processing_cascades = False
        if state.selected is not None and get_piece(self.world, state.selected) is None:
            state.selected = None
        if not state.game_over and piece_count(self.world) == 0:
            self._complete_level()

    def _complete_level(self) -> None:
        state = get_game_state(self.world)
        logger.info("Level %s complete in %s moves", state.level, state.moves)
        self.event_bus.emit(EVENT_LEVEL_COMPLETE, level=state.level, moves=state.moves)
        self.tasks.schedule(LEVEL_ADVANCE_DELAY, self._advance_level, label=LEVEL_ADVANCE_TASK)

    def _advance_level(self) -> None:
        state = get_game_state(self.world)
        if state.game_over:
            return
        state.level += 1
        self.generate_level()

    def _game_over(self, reason: str) -> None:
        state = get_game_state(self.world)
        if state.game_over:
            return
        state.game_over = True
        state.game_over_reason = reason
        logger.info("Game over (%s) at level %s with score %s", reason, state.level, state.score)
        self.event_bus.emit(
            EVENT_GAME_OVER,
            score=state.score,
            level=state.level,
            moves=state.moves,
            reason=reason,
        )
