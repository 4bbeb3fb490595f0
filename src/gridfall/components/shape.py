from dataclasses import dataclass
from typing import Tuple

Cell = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class Shape:
    """Named polyomino template shared by every piece built from it.

    cells: (x, y) offsets relative to the anchor the piece is created at.
    """
    name: str
    cells: Tuple[Cell, ...]

    @property
    def width(self) -> int:
        return max(x for x, _ in self.cells) + 1

    @property
    def height(self) -> int:
        return max(y for _, y in self.cells) + 1
