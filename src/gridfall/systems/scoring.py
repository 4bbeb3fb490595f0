from __future__ import annotations

import math
from time import monotonic
from typing import Callable

from esper import World

from gridfall.constants import (
    CELL_SCORE,
    CLEARED_CELL_SCORE,
    COMBO_MULTIPLIER_STEP,
    COMBO_TIMEOUT,
    LINE_CLEAR_SCORE,
    TIME_BONUS_STEPS,
)
from gridfall.events.bus import EventBus, EVENT_COMBO_UPDATE, EVENT_SCORE_UPDATE
from gridfall.systems.board_ops import get_game_state


def time_bonus(elapsed: float) -> float:
    for limit, multiplier in TIME_BONUS_STEPS:
        if elapsed < limit:
            return multiplier
    return 1.0


def removal_gain(cell_count: int, combo: int, elapsed: float) -> int:
    base = cell_count * CELL_SCORE
    combo_multiplier = 1 + COMBO_MULTIPLIER_STEP * combo
    return math.floor(base * combo_multiplier * time_bonus(elapsed))


def clear_bonus(clear_count: int, total_cells: int, combo: int) -> int:
    line_bonus = clear_count * LINE_CLEAR_SCORE * (1 + combo)
    cell_bonus = total_cells * CLEARED_CELL_SCORE
    return line_bonus + cell_bonus


class ScoringSystem:
    """Applies removal and clear scores to the GameState and tracks combo decay.

    Time bonuses compare the clock against ``last_move_time``, which only a
    player removal refreshes; clears triggered by the cascade do not.
    """

    def __init__(self, world: World, event_bus: EventBus, *, clock: Callable[[], float] | None = None) -> None:
        self.world = world
        self.event_bus = event_bus
        self.clock = clock or monotonic

    def score_removal(self, cell_count: int) -> int:
        state = get_game_state(self.world)
        now = self.clock()
        gain = removal_gain(cell_count, state.combo, now - state.last_move_time)
        state.score += gain
        state.combo += 1
        state.last_move_time = now
        self.event_bus.emit(EVENT_SCORE_UPDATE, score=state.score, score_gain=gain)
        self.event_bus.emit(EVENT_COMBO_UPDATE, combo=state.combo)
        return gain

    def score_clears(self, clear_count: int, total_cells: int) -> int:
        if clear_count <= 0:
            return 0
        state = get_game_state(self.world)
        bonus = clear_bonus(clear_count, total_cells, state.combo)
        state.score += bonus
        state.combo += clear_count
        self.event_bus.emit(EVENT_SCORE_UPDATE, score=state.score, score_gain=bonus)
        self.event_bus.emit(EVENT_COMBO_UPDATE, combo=state.combo)
        return bonus

    def decay_combo(self) -> bool:
        state = get_game_state(self.world)
        if state.combo <= 0:
            return False
        if self.clock() - state.last_move_time <= COMBO_TIMEOUT:
            return False
        state.combo = 0
        self.event_bus.emit(EVENT_COMBO_UPDATE, combo=0)
        return True
