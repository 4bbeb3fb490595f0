from gridfall.systems.board_ops import find_inconsistencies, get_board, get_piece
from gridfall.systems.line_detection import (
    apply_clears,
    detect_clears,
    find_full_rows,
    find_left_to_right_paths,
)
from tests.helpers import make_world, put, row_cells


def test_full_row_detected_only_when_every_cell_filled():
    world = make_world(10, 20)
    put(world, row_cells(19, range(10)))
    put(world, row_cells(18, range(9)))
    rows = find_full_rows(get_board(world))
    assert rows == [row_cells(19, range(10))]


def test_path_spanning_board_is_found():
    world = make_world(10, 20)
    # Staircase: columns 0-3 on row 10, down to row 11 for 3-6, up to row 9 for 6-9.
    put(world, row_cells(10, range(0, 4)))
    put(world, row_cells(11, range(3, 7)))
    put(world, row_cells(9, range(6, 10)) + [(6, 10)])
    paths = find_left_to_right_paths(get_board(world))
    assert len(paths) == 1
    path = paths[0]
    assert path[0] == (0, 10)
    assert path[-1][0] == 9
    xs = [x for x, _ in path]
    assert xs == sorted(xs)


def test_region_confined_to_middle_columns_never_yields_path():
    world = make_world(10, 20)
    for y in range(14, 20):
        put(world, row_cells(y, range(2, 6)))
    assert find_left_to_right_paths(get_board(world)) == []
    assert not detect_clears(get_board(world))


def test_path_never_steps_left():
    world = make_world(10, 20)
    # A U-turn: row 14 is only reachable by stepping left along row 12.
    put(world, row_cells(10, range(0, 6)))
    put(world, [(5, 11), (5, 12), (4, 12), (3, 12), (3, 13)])
    put(world, row_cells(14, range(3, 10)))
    paths = find_left_to_right_paths(get_board(world))
    assert paths == []


def test_path_prefers_right_then_down():
    world = make_world(10, 20)
    put(world, row_cells(5, range(0, 5)))
    put(world, row_cells(6, range(4, 10)))
    put(world, row_cells(4, range(4, 10)))
    paths = find_left_to_right_paths(get_board(world))
    assert len(paths) == 1
    assert (4, 6) in paths[0]
    assert all(y != 4 for _, y in paths[0])


def test_claimed_cells_are_not_reused_by_later_paths():
    world = make_world(10, 20)
    put(world, [(0, 3), (0, 4)])
    put(world, row_cells(3, range(1, 10)))
    paths = find_left_to_right_paths(get_board(world))
    # The start at (0, 4) could only continue through (0, 3), which the first path owns.
    assert len(paths) == 1
    assert paths[0][0] == (0, 3)


def test_dense_board_without_exit_finishes_quickly():
    world = make_world(10, 20)
    for y in range(20):
        put(world, row_cells(y, range(9)))
    assert find_left_to_right_paths(get_board(world)) == []


def test_full_bottom_row_is_also_a_path():
    world = make_world(10, 20)
    put(world, row_cells(19, range(10)))
    report = detect_clears(get_board(world))
    assert len(report.rows) == 1
    assert len(report.paths) == 1
    assert report.clear_count == 2
    assert report.total_cells == 10


def test_apply_clears_strips_cells_and_deletes_empty_pieces():
    world = make_world(10, 20)
    floor = put(world, row_cells(19, range(10)))
    tower = put(world, [(5, 17), (5, 18), (6, 18)])
    report = detect_clears(get_board(world))
    shrunk = apply_clears(world, report)
    assert shrunk == []
    assert get_piece(world, floor) is None
    assert not world.entity_exists(floor)
    assert get_piece(world, tower).cells == [(5, 17), (5, 18), (6, 18)]
    assert find_inconsistencies(world) == []


def test_apply_clears_reports_partially_cleared_pieces():
    world = make_world(10, 20)
    left = put(world, [(1, 18), (0, 19), (1, 19), (2, 19)])
    right = put(world, row_cells(19, range(3, 10)))
    shrunk = apply_clears(world, detect_clears(get_board(world)))
    assert shrunk == [left]
    assert get_piece(world, left).cells == [(1, 18)]
    assert get_piece(world, right) is None
    assert all(cell is None for cell in get_board(world).grid[19])
    assert find_inconsistencies(world) == []
