from gridfall.components.shape import Shape

BOARD_COLS = 10
BOARD_ROWS = 20

# Tetromino catalog. Offsets are (x, y) relative to the top-left anchor; y grows downward.
SHAPES = (
    Shape(name="I", cells=((0, 0), (1, 0), (2, 0), (3, 0))),
    Shape(name="O", cells=((0, 0), (1, 0), (0, 1), (1, 1))),
    Shape(name="T", cells=((1, 0), (0, 1), (1, 1), (2, 1))),
    Shape(name="S", cells=((1, 0), (2, 0), (0, 1), (1, 1))),
    Shape(name="Z", cells=((0, 0), (1, 0), (1, 1), (2, 1))),
    Shape(name="L", cells=((2, 0), (0, 1), (1, 1), (2, 1))),
    Shape(name="J", cells=((0, 0), (0, 1), (1, 1), (2, 1))),
)
SHAPES_BY_NAME = {shape.name: shape for shape in SHAPES}

PALETTE = (
    "#e74c3c", "#3498db", "#2ecc71", "#f39c12", "#9b59b6",
    "#1abc9c", "#e67e22", "#34495e", "#f1c40f", "#c0392b",
    "#2980b9", "#27ae60", "#d35400", "#8e44ad", "#16a085",
    "#7f8c8d", "#bdc3c7", "#95a5a6", "#2c3e50", "#ecf0f1",
)
KEY_PIECE_COLORS = ("#ff0000", "#00ff00", "#0000ff", "#ffff00", "#ff00ff", "#00ffff")

# ============================================================================
# LEVEL GENERATION
# ============================================================================
GAP_PATTERNS = (
    (4,),        # single gap in the middle
    (2, 7),
    (1, 5, 8),
    (3, 6),
    (0, 9),      # edge gaps
    (4, 5),      # adjacent gaps
)
LINE_SPACING = 4
# Generator-only pieces. Line rows stay one cell high so stacked lines settle flat.
VERTICAL_I = Shape(name="I", cells=((0, 0), (0, 1), (0, 2), (0, 3)))
LINE_BARS = {
    1: Shape(name="I1", cells=((0, 0),)),
    2: Shape(name="I2", cells=((0, 0), (1, 0))),
    3: Shape(name="I3", cells=((0, 0), (1, 0), (2, 0))),
    4: SHAPES_BY_NAME["I"],
}
CASCADE_PIECE_OFFSET = 3
BASE_FILLER_PIECES = 3
MAX_GENERATED_PIECES = 19
FILLER_PLACEMENT_ATTEMPTS = 20
GENERATION_ATTEMPTS = 12

# ============================================================================
# SCORING
# ============================================================================
CELL_SCORE = 10
COMBO_MULTIPLIER_STEP = 0.5
# (elapsed seconds upper bound, multiplier), checked in order.
TIME_BONUS_STEPS = ((1.0, 2.0), (2.0, 1.5), (5.0, 1.2))
LINE_CLEAR_SCORE = 100
CLEARED_CELL_SCORE = 5
COMBO_TIMEOUT = 3.0

# ============================================================================
# CORRUPTION & PRESSURE
# ============================================================================
CORRUPTION_RATE = 0.01         # rows per second per level
CORRUPTION_PUSHBACK = 0.5      # rows removed per player removal
CORRUPTION_HEADROOM = 5        # corruption never climbs above rows - headroom
TIME_LIMIT = 120.0             # seconds per level
SPAWN_CHANCE = 0.001           # per tick, multiplied by level
MAX_PIECES = 30
SPAWN_MARGIN = 4

# ============================================================================
# CASCADE TIMING
# ============================================================================
MAX_CASCADE_ITERATIONS = 10
CASCADE_DELAY = 0.1
LEVEL_ADVANCE_DELAY = 1.5
