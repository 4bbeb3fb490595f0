from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set

from esper import World

from gridfall.components.board import Board
from gridfall.components.piece import Piece
from gridfall.components.shape import Cell
from gridfall.systems.board_ops import get_board

# Right first, then the vertical walk-arounds. Stepping left is never allowed.
PATH_DIRECTIONS = ((1, 0), (0, 1), (0, -1))


@dataclass(slots=True)
class ClearReport:
    """Cells selected for clearing in one detection pass."""
    rows: List[List[Cell]] = field(default_factory=list)
    paths: List[List[Cell]] = field(default_factory=list)

    @property
    def groups(self) -> List[List[Cell]]:
        return self.rows + self.paths

    @property
    def clear_count(self) -> int:
        return len(self.rows) + len(self.paths)

    @property
    def cells(self) -> Set[Cell]:
        return {cell for group in self.groups for cell in group}

    @property
    def total_cells(self) -> int:
        return len(self.cells)

    def __bool__(self) -> bool:
        return self.clear_count > 0


def find_full_rows(board: Board) -> List[List[Cell]]:
    return [
        [(x, y) for x in range(board.cols)]
        for y in range(board.rows)
        if board.is_row_full(y)
    ]


def trace_path(board: Board, start: Cell, claimed: Set[Cell], dead: Set[Cell]) -> List[Cell]:
    """Depth-first search for a left-to-right path from ``start`` to the last column.

    Iterative, with one frame per path cell: ``(next direction index, entered
    from the left)``. Returns the first path found or an empty list. Cells
    entered from the left whose subtree failed are added to ``dead``: nothing
    right of them is on the path yet, so they fail again from any path.
    """
    last_col = board.cols - 1

    def open_cell(cell: Cell, on_path: Set[Cell]) -> bool:
        x, y = cell
        return board.is_occupied(x, y) and cell not in claimed and cell not in on_path

    if start in dead or not open_cell(start, set()):
        return []
    path: List[Cell] = [start]
    on_path: Set[Cell] = {start}
    frames: List[List] = [[0, True]]
    while path:
        x, y = path[-1]
        if x == last_col:
            return path
        frame = frames[-1]
        if frame[0] >= len(PATH_DIRECTIONS):
            cell = path.pop()
            on_path.discard(cell)
            frames.pop()
            if frame[1]:
                dead.add(cell)
            continue
        dx, dy = PATH_DIRECTIONS[frame[0]]
        frame[0] += 1
        step = (x + dx, y + dy)
        entering = dx == 1
        if entering and step in dead:
            continue
        if open_cell(step, on_path):
            path.append(step)
            on_path.add(step)
            frames.append([0, entering])
    return []


def find_left_to_right_paths(board: Board) -> List[List[Cell]]:
    paths: List[List[Cell]] = []
    claimed: Set[Cell] = set()
    dead: Set[Cell] = set()
    for y in range(board.rows):
        start = (0, y)
        if not board.is_occupied(0, y) or start in claimed:
            continue
        path = trace_path(board, start, claimed, dead)
        if path:
            paths.append(path)
            claimed.update(path)
    return paths


def detect_clears(board: Board) -> ClearReport:
    return ClearReport(rows=find_full_rows(board), paths=find_left_to_right_paths(board))


def apply_clears(world: World, report: ClearReport) -> List[int]:
    """Remove the report's cells from the board and from every piece owning them.

    Pieces left with no cells are deleted. Returns the ids of pieces that lost
    cells but survive, in iteration order, for the decoupler.
    """
    cleared = report.cells
    if not cleared:
        return []
    board = get_board(world)
    for x, y in cleared:
        board.clear_cell(x, y)
    shrunk: List[int] = []
    emptied: List[int] = []
    for piece_id, piece in world.get_component(Piece):
        remaining = [cell for cell in piece.cells if cell not in cleared]
        if len(remaining) == len(piece.cells):
            continue
        piece.cells = remaining
        if remaining:
            shrunk.append(piece_id)
        else:
            emptied.append(piece_id)
    for piece_id in emptied:
        world.delete_entity(piece_id, immediate=True)
    return shrunk
