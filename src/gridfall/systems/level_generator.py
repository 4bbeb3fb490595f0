from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from esper import World

from gridfall.config import GameConfig
from gridfall.constants import (
    BASE_FILLER_PIECES,
    CASCADE_PIECE_OFFSET,
    FILLER_PLACEMENT_ATTEMPTS,
    GAP_PATTERNS,
    GENERATION_ATTEMPTS,
    KEY_PIECE_COLORS,
    LINE_BARS,
    LINE_SPACING,
    MAX_GENERATED_PIECES,
    PALETTE,
    SHAPES,
    SHAPES_BY_NAME,
    VERTICAL_I,
)
from gridfall.systems.board_ops import add_piece, delete_piece, get_board, piece_count, pieces_by_id, place_piece
from gridfall.systems.gravity import resolve_gravity
from gridfall.systems.line_detection import detect_clears
from gridfall.world import create_world

logger = logging.getLogger(__name__)

MAX_LINES = 3


@dataclass(slots=True)
class LevelLayout:
    """What the generator built, for events and tests."""
    level: int
    gaps: Tuple[int, ...]
    lock_column: Optional[int] = None
    key: Optional[int] = None
    line_rows: List[int] = field(default_factory=list)
    plugs: List[int] = field(default_factory=list)
    cascade_pieces: List[int] = field(default_factory=list)
    filler_pieces: List[int] = field(default_factory=list)
    attempts: int = 0


def gap_pattern(level: int, cols: int) -> Tuple[int, ...]:
    pattern = GAP_PATTERNS[(level - 1) % len(GAP_PATTERNS)]
    return tuple(gap for gap in pattern if 0 <= gap < cols)


def line_count(level: int) -> int:
    return max(1, min(MAX_LINES, (level + 2) // 3))


def filler_count(level: int) -> int:
    return BASE_FILLER_PIECES + level // 2


def lock_columns(gaps: Iterable[int], cols: int) -> Tuple[Optional[int], Optional[int]]:
    """Pick the shaft left open for the falling square and the column the key stands in.

    The shaft must be an inner column: anything resting over an edge column is a
    path endpoint, so a square hanging there would already complete a path. When
    every gap sits on an edge, the shaft is the inner neighbour of one of them.
    """
    gap_set = set(gaps)
    candidates = [gap for gap in sorted(gap_set) if 0 < gap < cols - 1]
    if not candidates:
        if 0 in gap_set:
            candidates = [1]
        elif cols - 1 in gap_set:
            candidates = [cols - 2]
        else:
            candidates = [cols // 2]
    for lock in candidates:
        for side in (lock + 1, lock - 1):
            if 0 <= side < cols and side not in gap_set:
                return lock, side
    return None, None


def copy_pieces(source: World, target: World) -> Dict[int, int]:
    """Recreate every piece of ``source`` in ``target``, in id order. Returns old id -> new id."""
    mapping: Dict[int, int] = {}
    for piece_id, piece in sorted(pieces_by_id(source).items()):
        mapping[piece_id] = add_piece(target, piece.shape, piece.color, piece.cells)
    return mapping


def removal_clears(world: World, piece_id: int) -> bool:
    """Whether removing ``piece_id`` leads the cascade to at least one clear.

    Runs on a scratch copy. The cascade checks for clears right after the
    removal and again once gravity has moved something; a board that yields
    neither never clears.
    """
    config: GameConfig = getattr(world, "config")
    scratch = create_world(config, rng=getattr(world, "random", None))
    mapping = copy_pieces(world, scratch)
    if piece_id not in mapping:
        return False
    delete_piece(scratch, mapping[piece_id])
    board = get_board(scratch)
    if detect_clears(board):
        return True
    return resolve_gravity(scratch).moved and bool(detect_clears(board))


def find_clearing_removals(world: World) -> List[int]:
    return [piece_id for piece_id in sorted(pieces_by_id(world)) if removal_clears(world, piece_id)]


def is_playable(world: World, layout: LevelLayout) -> bool:
    """No clear is waiting on the board, and pulling the key produces one."""
    if layout.key is None or detect_clears(get_board(world)):
        return False
    return removal_clears(world, layout.key)


class LevelGenerator:
    """Builds a level with complete rows around a few open columns and one lock.

    Every gap but the lock shaft is plugged by a vertical I dropped into it. The
    lock shaft stays open beside the key, a vertical I carrying a square that
    hangs over the shaft. Removing the key drops the square into the shaft and
    completes the bottom row. Each attempt is built on a scratch world and
    checked, the way a fresh board is validated before it is accepted. Random
    fillers can spoil the lock, so the last attempt is built without them.
    """

    def __init__(self, world: World, *, rng: random.Random | None = None) -> None:
        self.world = world
        candidate_rng = rng or getattr(world, "random", None)
        self._rng: random.Random = candidate_rng or random.Random()
        self._color_index = 0

    def generate(self, level: int) -> LevelLayout:
        config: GameConfig = getattr(self.world, "config")
        for attempt in range(1, GENERATION_ATTEMPTS + 1):
            scratch = create_world(config, rng=self._rng)
            layout = self._build(scratch, level, fillers=attempt < GENERATION_ATTEMPTS)
            layout.attempts = attempt
            if is_playable(scratch, layout):
                break
            logger.debug("Level %s attempt %s rejected", level, attempt)
        else:
            logger.warning("Level %s generated without a verified clear", level)
        layout = self._commit(scratch, layout)
        logger.debug(
            "Level %s generated with %s pieces, gaps at %s, lock at %s",
            level,
            piece_count(self.world),
            list(layout.gaps),
            layout.lock_column,
        )
        return layout

    def _build(self, world: World, level: int, *, fillers: bool) -> LevelLayout:
        board = get_board(world)
        self._color_index = 0
        layout = LevelLayout(level=level, gaps=gap_pattern(level, board.cols))
        lock, side = lock_columns(layout.gaps, board.cols)
        layout.lock_column = lock
        openings = set(layout.gaps) | {column for column in (lock, side) if column is not None}
        lines = 0
        for line in range(line_count(level)):
            row = board.rows - 1 - line * LINE_SPACING
            if row < 1:
                break
            self._lay_line(world, row, openings)
            lines += 1
        # Lines share their openings, so each one settles straight onto the one below.
        resolve_gravity(world)
        layout.line_rows = [board.rows - 1 - line for line in range(lines)]
        if lock is not None and side is not None:
            self._place_lock(world, layout, lock, side)
        self._plug_gaps(world, layout)
        if fillers:
            self._scatter_fillers(world, level, layout)
        resolve_gravity(world)
        return layout

    def _next_color(self) -> str:
        color = PALETTE[self._color_index % len(PALETTE)]
        self._color_index += 1
        return color

    def _lay_line(self, world: World, row: int, openings: Iterable[int]) -> None:
        cols = get_board(world).cols
        x = 0
        while x < cols:
            if x in openings:
                x += 1
                continue
            end = x
            while end < cols and end not in openings:
                end += 1
            while x < end:
                length = min(4, end - x)
                place_piece(world, LINE_BARS[length], self._next_color(), x, row)
                x += length

    def _place_lock(self, world: World, layout: LevelLayout, lock: int, side: int) -> None:
        bottom = get_board(world).rows - 1
        square = SHAPES_BY_NAME["O"]
        key_top = bottom - VERTICAL_I.height + 1
        layout.key = place_piece(world, VERTICAL_I, KEY_PIECE_COLORS[0], side, key_top)
        if layout.key is None:
            return
        x = min(lock, side)
        y = key_top - square.height
        # The square over the shaft, then a second one three rows above it.
        for _ in range(2):
            if y < 0:
                break
            cascade_id = place_piece(world, square, self._next_color(), x, y)
            if cascade_id is None:
                break
            layout.cascade_pieces.append(cascade_id)
            y -= CASCADE_PIECE_OFFSET

    def _plug_gaps(self, world: World, layout: LevelLayout) -> None:
        bottom = get_board(world).rows - 1
        for index, gap in enumerate(layout.gaps):
            if gap == layout.lock_column:
                continue
            color = KEY_PIECE_COLORS[(index + 1) % len(KEY_PIECE_COLORS)]
            plug = place_piece(world, VERTICAL_I, color, gap, bottom - VERTICAL_I.height + 1)
            if plug is not None:
                layout.plugs.append(plug)

    def _scatter_fillers(self, world: World, level: int, layout: LevelLayout) -> None:
        board = get_board(world)
        band_top = board.rows // 4
        band_height = max(1, board.rows // 2)
        for _ in range(filler_count(level)):
            if piece_count(world) >= MAX_GENERATED_PIECES:
                break
            shape = self._rng.choice(SHAPES)
            color = self._next_color()
            for _attempt in range(FILLER_PLACEMENT_ATTEMPTS):
                x = self._rng.randrange(max(1, board.cols - 3))
                y = self._rng.randrange(band_height) + band_top
                piece_id = place_piece(world, shape, color, x, y)
                if piece_id is not None:
                    layout.filler_pieces.append(piece_id)
                    break

    def _commit(self, scratch: World, layout: LevelLayout) -> LevelLayout:
        mapping = copy_pieces(scratch, self.world)
        layout.key = mapping.get(layout.key) if layout.key is not None else None
        layout.plugs = [mapping[piece_id] for piece_id in layout.plugs]
        layout.cascade_pieces = [mapping[piece_id] for piece_id in layout.cascade_pieces]
        layout.filler_pieces = [mapping[piece_id] for piece_id in layout.filler_pieces]
        return layout
