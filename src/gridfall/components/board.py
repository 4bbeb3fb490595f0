from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from gridfall.components.shape import Cell


@dataclass(slots=True)
class Board:
    """Grid of optional piece ids, indexed ``grid[y][x]``.

    Pure storage: the board never owns pieces and emits no events. Callers keep
    the board and the Piece components consistent with each other.
    """
    rows: int
    cols: int
    grid: List[List[Optional[int]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.grid:
            self.grid = [[None] * self.cols for _ in range(self.rows)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.cols and 0 <= y < self.rows

    def at(self, x: int, y: int) -> Optional[int]:
        return self.grid[y][x]

    def is_occupied(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.grid[y][x] is not None

    def occupy(self, piece_id: int, cells: Iterable[Cell]) -> None:
        cells = list(cells)
        for x, y in cells:
            current = self.grid[y][x]
            if current is not None and current != piece_id:
                raise ValueError(f"Cell {(x, y)} already holds piece {current}, cannot stamp {piece_id}")
        for x, y in cells:
            self.grid[y][x] = piece_id

    def vacate(self, piece_id: int, cells: Iterable[Cell]) -> None:
        for x, y in cells:
            if self.in_bounds(x, y) and self.grid[y][x] == piece_id:
                self.grid[y][x] = None

    def clear_cell(self, x: int, y: int) -> None:
        self.grid[y][x] = None

    def can_move(self, piece_id: int, cells: Iterable[Cell], dx: int, dy: int) -> bool:
        for x, y in cells:
            nx, ny = x + dx, y + dy
            if not self.in_bounds(nx, ny):
                return False
            target = self.grid[ny][nx]
            if target is not None and target != piece_id:
                return False
        return True

    def can_place(self, cells: Iterable[Cell]) -> bool:
        return all(self.in_bounds(x, y) and self.grid[y][x] is None for x, y in cells)

    def is_row_full(self, y: int) -> bool:
        return all(cell is not None for cell in self.grid[y])

    def occupied_cells(self) -> Iterator[Tuple[Cell, int]]:
        for y, row in enumerate(self.grid):
            for x, piece_id in enumerate(row):
                if piece_id is not None:
                    yield (x, y), piece_id
