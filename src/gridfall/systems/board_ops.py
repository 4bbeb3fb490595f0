from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from esper import World

from gridfall.components.board import Board
from gridfall.components.game_state import GameState
from gridfall.components.piece import Piece
from gridfall.components.shape import Cell, Shape


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board resource not found")


def get_game_state(world: World) -> GameState:
    for _, state in world.get_component(GameState):
        return state
    raise RuntimeError("GameState resource not found")


def get_piece(world: World, piece_id: int | None) -> Piece | None:
    if piece_id is None or not world.entity_exists(piece_id):
        return None
    return world.try_component(piece_id, Piece)


def pieces_by_id(world: World) -> Dict[int, Piece]:
    return {entity: piece for entity, piece in world.get_component(Piece)}


def piece_count(world: World) -> int:
    return len(world.get_component(Piece))


def place_piece(world: World, shape: Shape, color: str, x: int, y: int) -> int | None:
    """Create a piece anchored at (x, y) if every target cell is in bounds and empty."""
    board = get_board(world)
    piece = Piece.from_shape(shape, color, x, y)
    if not board.can_place(piece.cells):
        return None
    piece_id = world.create_entity(piece)
    board.occupy(piece_id, piece.cells)
    return piece_id


def add_piece(world: World, shape: Shape, color: str, cells: Iterable[Cell]) -> int:
    """Create a piece from explicit cells; the cells must already be free or unowned."""
    board = get_board(world)
    piece = Piece(shape=shape, color=color, cells=list(cells))
    piece_id = world.create_entity(piece)
    board.occupy(piece_id, piece.cells)
    return piece_id


def delete_piece(world: World, piece_id: int) -> Piece | None:
    """Vacate the piece's cells and remove its entity. Returns the removed component."""
    piece = get_piece(world, piece_id)
    if piece is None:
        return None
    get_board(world).vacate(piece_id, piece.cells)
    world.delete_entity(piece_id, immediate=True)
    return piece


def find_inconsistencies(world: World) -> List[str]:
    """Audit the board against every piece; an empty list means both sides agree."""
    board = get_board(world)
    pieces = pieces_by_id(world)
    problems: List[str] = []
    for (x, y), piece_id in board.occupied_cells():
        piece = pieces.get(piece_id)
        if piece is None:
            problems.append(f"cell {(x, y)} references missing piece {piece_id}")
        elif piece.cells.count((x, y)) != 1:
            problems.append(f"piece {piece_id} lists cell {(x, y)} {piece.cells.count((x, y))} times")
    for piece_id, piece in pieces.items():
        if not piece.cells:
            problems.append(f"piece {piece_id} has no cells")
        for x, y in piece.cells:
            if not board.in_bounds(x, y):
                problems.append(f"piece {piece_id} cell {(x, y)} out of bounds")
            elif board.at(x, y) != piece_id:
                problems.append(f"piece {piece_id} cell {(x, y)} holds {board.at(x, y)} on the board")
    return problems


def board_rows(world: World) -> Tuple[Tuple[int | None, ...], ...]:
    return tuple(tuple(row) for row in get_board(world).grid)
