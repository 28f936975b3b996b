"""Power-flow analysis over a laid-out grid.

Every cell has an ``in`` terminal (left side) and an ``out`` terminal (right
side and vertical rail). Power enters at the ``in`` terminal of each cell in
column 0 and spreads breadth-first:

- ``in -> out`` inside a cell when the cell conducts,
- ``out -> in`` of the right neighbour over a right connection,
- ``out -> out`` of the cell below/above over a down/up connection.

The result is derived data for display only; it never feeds back into the
simulation state.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from typing import Literal, NamedTuple

from ladderflow.core.grid import Grid, GridCell
from ladderflow.core.instruction import NORMALLY_CLOSED_OPS, NORMALLY_OPEN_OPS

Side = Literal["in", "out"]


class Terminal(NamedTuple):
    """One side of one grid cell."""

    x: int
    y: int
    side: Side

    def __str__(self) -> str:
        return f"{self.x},{self.y},{self.side}"


def conducts(cell: GridCell, io_state: Mapping[str, bool]) -> bool:
    """Whether power entering ``cell`` on the left leaves on the right."""
    inst = cell.instruction
    if inst is None:
        return True
    if inst.type in NORMALLY_OPEN_OPS:
        return bool(io_state.get(inst.value, False))
    if inst.type in NORMALLY_CLOSED_OPS:
        return not io_state.get(inst.value, False)
    # Coils pass power on; comparators, block and stack operators are transparent.
    return True


def energize(grid: Grid, io_state: Mapping[str, bool]) -> frozenset[Terminal]:
    """Return every terminal reachable from the left power rail."""
    if not grid:
        return frozenset()

    rows = len(grid)
    cols = len(grid[0])
    queue: deque[Terminal] = deque(Terminal(0, y, "in") for y in range(rows))
    visited: set[Terminal] = set()

    while queue:
        terminal = queue.popleft()
        if terminal in visited:
            continue
        visited.add(terminal)

        x, y, side = terminal
        cell = grid[y][x]

        if side == "in":
            if conducts(cell, io_state):
                queue.append(Terminal(x, y, "out"))
            continue

        wiring = cell.connections
        if wiring.right and x + 1 < cols:
            queue.append(Terminal(x + 1, y, "in"))
        if wiring.down and y + 1 < rows:
            queue.append(Terminal(x, y + 1, "out"))
        if wiring.up and y > 0:
            queue.append(Terminal(x, y - 1, "out"))

    return frozenset(visited)


def is_energized(terminals: frozenset[Terminal], x: int, y: int, side: Side = "in") -> bool:
    return Terminal(x, y, side) in terminals
