"""Game state resource holding counters and flags for the running level."""
from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class GameState:
    """Singleton component storing everything about a level except board and pieces.

    ``animating`` and ``processing_cascades`` act as input locks: while either is
    set, piece selection is ignored.
    """
    level: int = 1
    selected: Optional[int] = None
    moves: int = 0
    score: int = 0
    combo: int = 0
    corruption_level: float = 0.0
    time_remaining: float = 120.0
    animating: bool = False
    processing_cascades: bool = False
    game_over: bool = False
    game_over_reason: Optional[str] = None
    last_move_time: float = 0.0
