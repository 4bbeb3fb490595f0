from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from esper import World

from gridfall.components.shape import Cell
from gridfall.systems.board_ops import board_rows, get_game_state, pieces_by_id


@dataclass(frozen=True, slots=True)
class PieceView:
    id: int
    shape: str
    color: str
    cells: Tuple[Cell, ...]


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """Read-only copy of the game for renderers and HUDs."""
    board: Tuple[Tuple[Optional[int], ...], ...]
    pieces: Mapping[int, PieceView]
    selected: Optional[int]
    moves: int
    level: int
    score: int
    combo: int
    corruption_level: float
    time_remaining: float
    animating: bool
    processing_cascades: bool
    game_over: bool
    game_over_reason: Optional[str]
    last_move_time: float

    @property
    def rows(self) -> int:
        return len(self.board)

    @property
    def cols(self) -> int:
        return len(self.board[0]) if self.board else 0


def take_snapshot(world: World) -> GameSnapshot:
    state = get_game_state(world)
    pieces = {
        piece_id: PieceView(id=piece_id, shape=piece.shape.name, color=piece.color, cells=tuple(piece.cells))
        for piece_id, piece in pieces_by_id(world).items()
    }
    return GameSnapshot(
        board=board_rows(world),
        pieces=MappingProxyType(pieces),
        selected=state.selected,
        moves=state.moves,
        level=state.level,
        score=state.score,
        combo=state.combo,
        corruption_level=state.corruption_level,
        time_remaining=state.time_remaining,
        animating=state.animating,
        processing_cascades=state.processing_cascades,
        game_over=state.game_over,
        game_over_reason=state.game_over_reason,
        last_move_time=state.last_move_time,
    )
