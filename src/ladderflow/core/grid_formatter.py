"""Plain-text rendering of a ladder grid."""

from __future__ import annotations

from collections.abc import Set

from ladderflow.core.grid import Grid, GridCell
from ladderflow.core.instruction import Instruction, Opcode
from ladderflow.core.power_flow import Terminal

CELL_WIDTH = 9
LABEL_WIDTH = CELL_WIDTH - 2
LIVE_WIRE = "="
DEAD_WIRE = "-"


class GridFormatter:
    """Build stable, human-readable ladder diagrams.

    Each grid row renders as one text line, followed by a line carrying the
    vertical links to the row below. Energized wiring is drawn with ``=``,
    unpowered wiring with ``-``.
    """

    @staticmethod
    def label(inst: Instruction) -> str:
        value = inst.value
        match inst.type:
            case Opcode.LD | Opcode.AND | Opcode.OR:
                text = f"[{value}]"
            case Opcode.LDI | Opcode.ANI | Opcode.ORI:
                text = f"[/{value}]"
            case Opcode.LD_EQ | Opcode.AND_EQ | Opcode.OR_EQ:
                text = f"[{value}={inst.arg(1, '0')}]"
            case Opcode.OUT:
                text = f"({value})"
            case Opcode.SET:
                text = f"(S {value})"
            case Opcode.RST:
                text = f"(R {value})"
            case Opcode.MOV | Opcode.MOVP:
                text = f"{str(inst.type)} {inst.arg(0)}>{inst.arg(1)}"
            case _:
                text = str(inst.type)
        return text[:LABEL_WIDTH]

    @classmethod
    def cell_text(cls, cell: GridCell, live: bool) -> str:
        wiring = cell.connections
        wire = LIVE_WIRE if live else DEAD_WIRE
        fed = wiring.left or (cell.x == 0 and not cell.is_empty)

        left = wire if fed else " "
        if cell.instruction is not None:
            body = cls.label(cell.instruction).center(LABEL_WIDTH, wire if fed else " ")
        elif wiring.left or wiring.right:
            body = wire * LABEL_WIDTH
        else:
            body = " " * LABEL_WIDTH

        if wiring.up or wiring.down:
            right = "+"
        elif wiring.right:
            right = wire
        else:
            right = " "
        return left + body + right

    @classmethod
    def format(cls, grid: Grid, energized: Set[Terminal] = frozenset()) -> str:
        """Render ``grid``; ``energized`` comes from `energize`."""
        lines: list[str] = []
        for row in grid:
            text = "".join(
                cls.cell_text(cell, Terminal(cell.x, cell.y, "out") in energized) for cell in row
            )
            lines.append(("|" + text).rstrip())
            if any(cell.connections.down for cell in row):
                links = "".join(
                    " " * (CELL_WIDTH - 1) + ("|" if cell.connections.down else " ")
                    for cell in row
                )
                lines.append(("|" + links).rstrip())
        return "\n".join(lines)


def format_grid(grid: Grid, energized: Set[Terminal] = frozenset()) -> str:
    return GridFormatter.format(grid, energized)
