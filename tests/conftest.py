"""Pytest configuration and test helpers."""

from __future__ import annotations

from ladderflow.core import GridCell, Instruction, Opcode, SimulationState, step
from ladderflow.core.grid import Grid, iter_cells


def program(*specs: tuple[str, ...]) -> list[Instruction]:
    """Build an instruction list from ``(opcode, operand, ...)`` tuples.

    Ids are 1, 2, 3... and ``value`` mirrors the first operand, the way the
    mnemonic lexer fills them.

    Example:
        program(("LD", "X0"), ("OUT", "T0", "K10"))
    """
    instructions = []
    for position, (opcode, *operands) in enumerate(specs, start=1):
        instructions.append(
            Instruction(
                id=position,
                type=Opcode.parse(opcode) or opcode,
                value=operands[0] if operands else "",
                args=tuple(operands),
            )
        )
    return instructions


def scan(
    instructions: list[Instruction],
    io: dict[str, bool] | None = None,
    *,
    data: dict[str, int] | None = None,
    dt_ms: int = 0,
) -> SimulationState:
    """Run one scan from a fresh state seeded with ``io`` and ``data``."""
    return step(instructions, SimulationState.initial(io=io, data=data), dt_ms)


def cell(grid: Grid, x: int, y: int) -> GridCell:
    """Return the cell at ``(x, y)``, checking its coordinates on the way."""
    found = grid[y][x]
    assert (found.x, found.y) == (x, y)
    return found


def instruction_cells(grid: Grid) -> dict[str, GridCell]:
    """Map ``"<opcode> <value>"`` to the cell holding that instruction."""
    return {
        f"{str(cell.instruction.type)} {cell.instruction.value}".strip(): cell
        for cell in iter_cells(grid)
        if cell.instruction is not None
    }
