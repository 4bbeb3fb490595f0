from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from gridfall.components.shape import Cell, Shape


@dataclass(slots=True)
class Piece:
    """A colored cluster of board cells built from a shape template.

    The piece id is the entity that carries this component. The piece owns
    ``cells``; the Board only stores the id at each occupied coordinate.
    Clearing can leave the cells disconnected until the decoupler splits them.
    """
    shape: Shape
    color: str
    cells: List[Cell] = field(default_factory=list)

    @classmethod
    def from_shape(cls, shape: Shape, color: str, x: int, y: int) -> "Piece":
        return cls(shape=shape, color=color, cells=[(x + dx, y + dy) for dx, dy in shape.cells])

    def bottom_y(self) -> int:
        return max(y for _, y in self.cells)

    def translate(self, dx: int, dy: int) -> None:
        self.cells = [(x + dx, y + dy) for x, y in self.cells]
