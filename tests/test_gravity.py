from gridfall.systems.board_ops import find_inconsistencies, get_board, get_piece
from gridfall.systems.gravity import resolve_gravity
from tests.helpers import make_world, put


def test_single_piece_falls_to_floor():
    world = make_world(10, 20)
    piece_id = put(world, [(2, 3), (3, 3)])
    result = resolve_gravity(world)
    assert result.moved
    assert sorted(get_piece(world, piece_id).cells) == [(2, 19), (3, 19)]
    assert result.falling_pieces() == {piece_id: (3, 19)}
    assert find_inconsistencies(world) == []


def test_stack_settles_in_one_resolution():
    world = make_world(6, 10)
    lower = put(world, [(0, 5), (1, 5), (2, 5)])
    upper = put(world, [(1, 2), (1, 3)])
    result = resolve_gravity(world)
    assert sorted(get_piece(world, lower).cells) == [(0, 9), (1, 9), (2, 9)]
    assert sorted(get_piece(world, upper).cells) == [(1, 7), (1, 8)]
    spans = {span.piece_id: span for span in result.spans}
    assert spans[upper].start_row == 3 and spans[upper].end_row == 8
    assert spans[lower].distance == 4


def test_overhang_rests_on_highest_support():
    world = make_world(6, 10)
    post = put(world, [(3, 8), (3, 9)])
    ledge = put(world, [(2, 1), (3, 1), (4, 1)])
    resolve_gravity(world)
    assert sorted(get_piece(world, ledge).cells) == [(2, 7), (3, 7), (4, 7)]
    assert sorted(get_piece(world, post).cells) == [(3, 8), (3, 9)]


def test_gravity_is_idempotent_on_settled_board():
    world = make_world(8, 12)
    put(world, [(0, 2), (1, 2), (1, 1)])
    put(world, [(1, 6), (2, 6), (3, 6)])
    put(world, [(5, 0), (5, 1)])
    resolve_gravity(world)
    before = [row[:] for row in get_board(world).grid]
    again = resolve_gravity(world)
    assert not again.moved
    assert again.spans == []
    assert get_board(world).grid == before


def test_empty_board_reports_no_motion():
    world = make_world()
    result = resolve_gravity(world)
    assert not result.moved and result.passes == 0
