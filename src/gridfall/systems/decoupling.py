from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Set

from esper import World

from gridfall.components.shape import Cell
from gridfall.systems.board_ops import add_piece, get_board, get_piece

logger = logging.getLogger(__name__)

NEIGHBOURS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def connected_groups(cells: Sequence[Cell]) -> List[List[Cell]]:
    """Split cells into 4-connected groups, ordered by their first cell in ``cells``."""
    cell_set: Set[Cell] = set(cells)
    visited: Set[Cell] = set()
    groups: List[List[Cell]] = []
    for start in cells:
        if start in visited:
            continue
        group: List[Cell] = []
        stack = [start]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            group.append(current)
            x, y = current
            for dx, dy in NEIGHBOURS:
                neighbour = (x + dx, y + dy)
                if neighbour in cell_set and neighbour not in visited:
                    stack.append(neighbour)
        groups.append(group)
    return groups


def decouple_piece(world: World, piece_id: int) -> List[int]:
    """Split a piece whose cells are no longer connected. Returns the new piece ids.

    The first group keeps the original id; each further group becomes a new
    piece with the same shape and color.
    """
    piece = get_piece(world, piece_id)
    if piece is None or not piece.cells:
        return []
    groups = connected_groups(piece.cells)
    if len(groups) <= 1:
        return []
    board = get_board(world)
    board.vacate(piece_id, piece.cells)
    piece.cells = groups[0]
    board.occupy(piece_id, piece.cells)
    new_ids: List[int] = []
    for group in groups[1:]:
        new_ids.append(add_piece(world, piece.shape, piece.color, group))
    logger.debug("Piece %s split into %s fragments", piece_id, len(groups))
    return new_ids


def decouple_pieces(world: World, piece_ids: Iterable[int]) -> Dict[int, List[int]]:
    split: Dict[int, List[int]] = {}
    for piece_id in piece_ids:
        new_ids = decouple_piece(world, piece_id)
        if new_ids:
            split[piece_id] = new_ids
    return split
