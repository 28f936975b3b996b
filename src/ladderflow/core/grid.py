"""Grid cells produced by the layout engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ladderflow.core.instruction import Instruction


@dataclass(frozen=True)
class Connections:
    """Wire stubs leaving a cell on each side."""

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False

    def any(self) -> bool:
        return self.up or self.down or self.left or self.right

    def to_dict(self) -> dict[str, bool]:
        return {"up": self.up, "down": self.down, "left": self.left, "right": self.right}


@dataclass(frozen=True)
class GridCell:
    """One schematic position.

    A cell with no instruction and at least one connection is a plain wire or
    junction; a cell with neither is an empty placeholder.

    Attributes:
        x: Column, 0 is next to the left power rail.
        y: Row.
        instruction: Instruction drawn here, if any.
        connections: Wiring on each side.
        source_index: Index of ``instruction`` in the laid-out sequence.
    """

    x: int
    y: int
    instruction: Instruction | None = None
    connections: Connections = field(default_factory=Connections)
    source_index: int | None = None

    @property
    def is_wire(self) -> bool:
        return self.instruction is None and self.connections.any()

    @property
    def is_empty(self) -> bool:
        return self.instruction is None and not self.connections.any()

    def to_dict(self) -> dict[str, Any]:
        """Return the grid record consumed by renderers."""
        return {
            "x": self.x,
            "y": self.y,
            "instruction": self.instruction.to_dict() if self.instruction is not None else None,
            "connections": self.connections.to_dict(),
            "sourceIndex": self.source_index,
        }


Grid = list[list[GridCell]]
"""Rectangular grid indexed ``grid[y][x]``."""


def grid_size(grid: Grid) -> tuple[int, int]:
    """Return ``(columns, rows)``."""
    if not grid:
        return 0, 0
    return len(grid[0]), len(grid)


def iter_cells(grid: Grid):
    """Yield every cell row by row."""
    for row in grid:
        yield from row
