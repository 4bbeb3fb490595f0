from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Hosts and HUD code hand in lambdas that nothing else references; a
        # weak connection would drop them before the first emit.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SELECTION & REMOVAL
# ============================================================================
EVENT_PIECE_SELECTED = "piece_selected"        # payload: piece_id=int|None
EVENT_PIECE_REMOVED = "piece_removed"          # payload: piece_id=int, moves=int, score=int


# ============================================================================
# SCORING
# ============================================================================
EVENT_SCORE_UPDATE = "score_update"            # payload: score=int, score_gain=int
EVENT_COMBO_UPDATE = "combo_update"            # payload: combo=int


# ============================================================================
# BOARD MECHANICS
# ============================================================================
EVENT_LINE_CLEARED = "line_cleared"            # payload: paths=list[list[(x,y)]], path_count=int, row_count=int, total_cells=int, bonus=int
EVENT_GRAVITY_APPLIED = "gravity_applied"      # payload: falling_pieces=dict[int, (from_row, to_row)]
EVENT_PIECE_DECOUPLED = "piece_decoupled"      # payload: piece_id=int, new_piece_ids=list[int]
EVENT_CASCADE_COMPLETE = "cascade_complete"    # payload: iterations=int, clears=int, capped=bool
EVENT_NEW_PIECE_SPAWNED = "new_piece_spawned"  # payload: piece_id=int


# ============================================================================
# PRESSURE & TIME
# ============================================================================
EVENT_CORRUPTION_RISE = "corruption_rise"      # payload: level=float
EVENT_TIME_UPDATE = "time_update"              # payload: time_remaining=float, corruption_level=float


# ============================================================================
# LEVEL FLOW
# ============================================================================
EVENT_LEVEL_GENERATED = "level_generated"      # payload: level=int, gaps=list[int], piece_count=int
EVENT_LEVEL_COMPLETE = "level_complete"        # payload: level=int, moves=int
EVENT_GAME_OVER = "game_over"                  # payload: score=int, level=int, moves=int, reason=str
