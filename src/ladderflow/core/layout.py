"""Layout engine: rebuilds a ladder schematic from a linear instruction list.

The instruction list is a stack program; its branch operators form a small
grammar (start pushes a block, ORB/ANB pop and combine, MPS/MRD/MPP manage
branch anchors). `layout` evaluates that grammar in one left-to-right pass
over plain block records and returns a rectangular grid of cells.

Placement rules:

- A start (LD/LDI/LD=) opens a block on a fresh row below all used rows.
- A parallel contact (OR/ORI/OR=) opens a fresh row on the rail, since it
  ORs with everything accumulated so far.
- A series element (AND/ANI/AND= and the coils) goes at the block's end
  column on its output row, after joining any open parallel rows.
- ORB pads both blocks to a common width and stacks them.
- ANB places the current block, from its first row down, to the right of the
  previous one, joined by one junction column.
- MPS marks a branch anchor; MRD/MPP drop a vertical bus from the anchor to
  a fresh row and continue from there.

Merged rows reach the output row over the vertical tie only; they never get
a ``right`` connection of their own, so a later tie crossing a closed row
cannot feed power into it.

Malformed branch operators (ORB/ANB/MRD/MPP with nothing to pop) draw
nothing and leave the bookkeeping untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from ladderflow.core.grid import Connections, Grid, GridCell
from ladderflow.core.instruction import (
    BLOCK_OPS,
    PARALLEL_OPS,
    SERIES_OPS,
    START_OPS,
    STACK_OPS,
    Instruction,
    Opcode,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Block:
    """Bookkeeping for the block being built.

    ``min_y`` is the output row series elements continue on; ``top_y`` is the
    first row the block owns. Every row from ``top_y`` down belongs to it.
    """

    end_x: int = 0
    active_rows: frozenset[int] = frozenset({0})
    min_y: int = 0
    top_y: int = 0


@dataclass(slots=True)
class _Draft:
    """Mutable cell while the layout pass runs."""

    instruction: Instruction | None = None
    source_index: int | None = None
    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False


class _LayoutBuilder:
    """Accumulator for one layout pass. Owned by a single `layout` call."""

    def __init__(self) -> None:
        self.cells: dict[tuple[int, int], _Draft] = {}
        self.row_end: dict[int, int] = {}
        self.max_y = 0
        self.block = _Block()
        self.blocks: list[_Block] = []
        self.anchors: list[tuple[int, int]] = []

    # -------------------------------------------------------------------------
    # Cell primitives
    # -------------------------------------------------------------------------

    def cell(self, x: int, y: int) -> _Draft:
        """Return the draft at ``(x, y)``, creating an empty one if needed."""
        draft = self.cells.get((x, y))
        if draft is None:
            draft = _Draft()
            self.cells[(x, y)] = draft
            if x > self.row_end.get(y, -1):
                self.row_end[y] = x
        return draft

    def join_left(self, x: int, y: int) -> None:
        """Wire ``(x, y)`` to the cell on its left, if there is one."""
        if x <= 0:
            return
        neighbour = self.cells.get((x - 1, y))
        if neighbour is None:
            return
        neighbour.right = True
        self.cells[(x, y)].left = True

    def place(self, x: int, y: int, inst: Instruction, index: int, *, wired_left: bool) -> None:
        draft = self.cell(x, y)
        draft.instruction = inst
        draft.source_index = index
        if wired_left:
            self.join_left(x, y)

    def fill_row(self, y: int, target_x: int) -> None:
        """Extend row ``y`` with plain wire up to (not including) ``target_x``."""
        for x in range(self.row_end.get(y, -1) + 1, target_x):
            self.cell(x, y)
            self.join_left(x, y)

    def vertical(self, x: int, top: int, bottom: int) -> None:
        """Tie rows ``top..bottom`` together along column ``x``."""
        for y in range(top, bottom + 1):
            draft = self.cell(x, y)
            if y > top:
                draft.up = True
            if y < bottom:
                draft.down = True

    def new_row(self) -> int:
        self.max_y += 1
        return self.max_y

    # -------------------------------------------------------------------------
    # Block operations
    # -------------------------------------------------------------------------

    def converge(self, block: _Block) -> _Block:
        """Join every active row of ``block`` at its last column.

        Only the output row carries on to the right; the other rows feed it
        through the vertical tie.
        """
        if len(block.active_rows) <= 1:
            return block
        column = block.end_x - 1
        for y in block.active_rows:
            self.fill_row(y, column + 1)
        self.vertical(column, min(block.active_rows), max(block.active_rows))
        return replace(block, active_rows=frozenset({block.min_y}))

    def start(self, inst: Instruction, index: int) -> None:
        if not self.cells and not self.blocks:
            # First drawn instruction: a new diagram.
            self.max_y = 0
            self.anchors.clear()
            y = 0
        else:
            self.blocks.append(self.block)
            y = self.new_row()
        self.place(0, y, inst, index, wired_left=False)
        self.block = _Block(end_x=1, active_rows=frozenset({y}), min_y=y, top_y=y)

    def parallel(self, inst: Instruction, index: int) -> None:
        y = self.new_row()
        self.place(0, y, inst, index, wired_left=False)
        self.block = replace(self.block, active_rows=self.block.active_rows | {y})

    def series(self, inst: Instruction, index: int) -> None:
        block = self.converge(self.block)
        x = block.end_x
        self.place(x, block.min_y, inst, index, wired_left=True)
        self.block = replace(block, end_x=x + 1)

    def or_block(self) -> None:
        if not self.blocks:
            logger.debug("ORB without a block to merge; ignored")
            return
        previous = self.blocks.pop()
        current = self.block
        end_x = max(previous.end_x, current.end_x)
        for y in sorted(previous.active_rows | current.active_rows):
            self.fill_row(y, end_x)
        self.block = _Block(
            end_x=end_x,
            active_rows=previous.active_rows | current.active_rows,
            min_y=min(previous.min_y, current.min_y),
            top_y=previous.top_y,
        )

    def and_block(self) -> None:
        if not self.blocks:
            logger.debug("ANB without a block to merge; ignored")
            return
        previous = self.converge(self.blocks.pop())
        current = self.block
        junction = previous.end_x
        offset = junction + 1
        self._shift_rows(current.top_y, offset)

        # Rows that began on the rail now begin right after the junction.
        rows = sorted(y for y in self.row_end if y >= current.top_y)
        entry_rows = [y for y in rows if self._row_start(y) == offset]
        bottom = max(entry_rows, default=current.top_y)
        self.cell(junction, previous.min_y)
        self.join_left(junction, previous.min_y)
        self.vertical(junction, previous.min_y, bottom)
        for y in entry_rows:
            self.join_left(offset, y)

        self.block = _Block(
            end_x=offset + current.end_x,
            active_rows=current.active_rows,
            min_y=current.min_y,
            top_y=previous.top_y,
        )

    def _row_start(self, y: int) -> int:
        return min(x for (x, row) in self.cells if row == y)

    def _shift_rows(self, from_y: int, offset: int) -> None:
        if not offset:
            return
        moved = {
            (x + offset, y) if y >= from_y else (x, y): draft
            for (x, y), draft in self.cells.items()
        }
        self.cells = moved
        for y in self.row_end:
            if y >= from_y:
                self.row_end[y] += offset
        self.anchors = [(x + offset, y) if y >= from_y else (x, y) for x, y in self.anchors]

    # -------------------------------------------------------------------------
    # Branch anchors (vertical bus)
    # -------------------------------------------------------------------------

    def push_anchor(self, inst: Instruction, index: int) -> None:
        block = self.converge(self.block)
        x, y = block.end_x, block.min_y
        self.anchors.append((x, y))
        self.place(x, y, inst, index, wired_left=True)
        self.block = replace(block, end_x=x + 1)

    def drop_from_anchor(self, inst: Instruction, index: int, *, pop: bool) -> None:
        if not self.anchors:
            logger.debug("%s without a branch anchor; ignored", inst.type)
            return
        x, anchor_y = self.anchors.pop() if pop else self.anchors[-1]
        y = self.new_row()
        self.vertical(x, anchor_y, y)
        self.place(x, y, inst, index, wired_left=False)
        self.block = replace(self.block, end_x=x + 1, active_rows=frozenset({y}), min_y=y)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def build(self) -> Grid:
        if not self.cells:
            return []
        max_x = max(x for x, _ in self.cells)
        max_y = max(y for _, y in self.cells)
        grid: Grid = []
        for y in range(max_y + 1):
            row = []
            for x in range(max_x + 1):
                draft = self.cells.get((x, y))
                if draft is None:
                    row.append(GridCell(x=x, y=y))
                    continue
                row.append(
                    GridCell(
                        x=x,
                        y=y,
                        instruction=draft.instruction,
                        connections=Connections(
                            up=draft.up, down=draft.down, left=draft.left, right=draft.right
                        ),
                        source_index=draft.source_index,
                    )
                )
            grid.append(row)
        return grid


def layout(instructions: Sequence[Instruction]) -> Grid:
    """Lay out ``instructions`` as a ladder grid.

    Pure and deterministic; never raises for a sequence of instructions.
    Unknown opcodes are skipped.

    Returns:
        ``grid[y][x]`` rows of `GridCell`, or ``[]`` when nothing was drawn.
    """
    builder = _LayoutBuilder()
    for index, inst in enumerate(instructions):
        op = inst.type
        if op in START_OPS:
            builder.start(inst, index)
        elif op in PARALLEL_OPS:
            builder.parallel(inst, index)
        elif op in SERIES_OPS:
            builder.series(inst, index)
        elif op in BLOCK_OPS:
            if op == Opcode.ORB:
                builder.or_block()
            else:
                builder.and_block()
        elif op in STACK_OPS:
            if op == Opcode.MPS:
                builder.push_anchor(inst, index)
            else:
                builder.drop_from_anchor(inst, index, pop=op == Opcode.MPP)
        else:
            logger.debug("Skipping unknown opcode %r at index %d", op, index)
    return builder.build()
