from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from esper import World

from gridfall.components.piece import Piece
from gridfall.systems.board_ops import get_board


@dataclass(slots=True)
class FallSpan:
    piece_id: int
    start_row: int
    end_row: int

    @property
    def distance(self) -> int:
        return self.end_row - self.start_row


@dataclass(slots=True)
class GravityResult:
    moved: bool = False
    passes: int = 0
    spans: List[FallSpan] = field(default_factory=list)

    def falling_pieces(self) -> Dict[int, tuple[int, int]]:
        return {span.piece_id: (span.start_row, span.end_row) for span in self.spans}


def fall_distance(board, piece_id: int, piece: Piece) -> int:
    dy = 0
    while board.can_move(piece_id, piece.cells, 0, dy + 1):
        dy += 1
    return dy


def resolve_gravity(world: World) -> GravityResult:
    """Drop every piece as far as it goes, repeating passes until nothing moves.

    Each pass handles the lowest pieces first so that they are already settled
    when the pieces resting on them are processed. Spans record bottom rows
    before the first move and after the last one.
    """
    board = get_board(world)
    pieces = list(world.get_component(Piece))
    result = GravityResult()
    if not pieces:
        return result
    spans: Dict[int, FallSpan] = {}
    # Every productive pass lowers some piece by at least one row.
    max_passes = len(pieces) * board.rows + 1
    changed = True
    while changed and result.passes < max_passes:
        changed = False
        result.passes += 1
        ordered = sorted(pieces, key=lambda item: item[1].bottom_y(), reverse=True)
        for piece_id, piece in ordered:
            board.vacate(piece_id, piece.cells)
            dy = fall_distance(board, piece_id, piece)
            if dy > 0:
                start = piece.bottom_y()
                piece.translate(0, dy)
                span = spans.get(piece_id)
                if span is None:
                    spans[piece_id] = FallSpan(piece_id=piece_id, start_row=start, end_row=start + dy)
                else:
                    span.end_row = start + dy
                changed = True
            board.occupy(piece_id, piece.cells)
    result.spans = list(spans.values())
    result.moved = bool(result.spans)
    return result
