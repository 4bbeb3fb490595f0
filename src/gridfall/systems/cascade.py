from __future__ import annotations

import logging
from dataclasses import dataclass

from esper import World

from gridfall.constants import MAX_CASCADE_ITERATIONS
from gridfall.events.bus import (
    EventBus,
    EVENT_CASCADE_COMPLETE,
    EVENT_GRAVITY_APPLIED,
    EVENT_LINE_CLEARED,
    EVENT_PIECE_DECOUPLED,
)
from gridfall.systems.board_ops import get_board
from gridfall.systems.decoupling import decouple_pieces
from gridfall.systems.gravity import resolve_gravity
from gridfall.systems.line_detection import apply_clears, detect_clears
from gridfall.systems.scoring import ScoringSystem

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CascadeResult:
    iterations: int = 0
    clears: int = 0
    capped: bool = False


class CascadeSystem:
    """Runs clear → decouple → gravity until gravity stops moving pieces.

    Flow per iteration:
      - detect full rows and left-to-right paths on the current board, clear
        them and score the batch;
      - split every piece the clear cut into disconnected fragments;
      - settle the board; another iteration follows only if something fell.
    The loop stops after ``max_iterations`` and leaves the board as it is.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        scoring: ScoringSystem,
        *,
        max_iterations: int = MAX_CASCADE_ITERATIONS,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.scoring = scoring
        self.max_iterations = max_iterations
        self.running = False

    def run(self) -> CascadeResult | None:
        if self.running:
            return None
        self.running = True
        try:
            return self._run()
        finally:
            self.running = False

    def _run(self) -> CascadeResult:
        result = CascadeResult()
        changed = True
        while changed and result.iterations < self.max_iterations:
            changed = False
            result.iterations += 1
            result.clears += self._clear_step()
            gravity = resolve_gravity(self.world)
            if gravity.moved:
                self.event_bus.emit(EVENT_GRAVITY_APPLIED, falling_pieces=gravity.falling_pieces())
                changed = True
        result.capped = changed
        if result.capped:
            logger.debug("Cascade stopped at the %s iteration cap", self.max_iterations)
        logger.debug("Cascade complete after %s iterations, %s clears", result.iterations, result.clears)
        self.event_bus.emit(
            EVENT_CASCADE_COMPLETE,
            iterations=result.iterations,
            clears=result.clears,
            capped=result.capped,
        )
        return result

    def _clear_step(self) -> int:
        report = detect_clears(get_board(self.world))
        if not report:
            return 0
        bonus = self.scoring.score_clears(report.clear_count, report.total_cells)
        self.event_bus.emit(
            EVENT_LINE_CLEARED,
            paths=report.groups,
            path_count=report.clear_count,
            row_count=len(report.rows),
            total_cells=report.total_cells,
            bonus=bonus,
        )
        shrunk = apply_clears(self.world, report)
        for piece_id, new_ids in decouple_pieces(self.world, shrunk).items():
            self.event_bus.emit(EVENT_PIECE_DECOUPLED, piece_id=piece_id, new_piece_ids=new_ids)
        return report.clear_count
