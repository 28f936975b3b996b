"""Pure editing helpers for instruction lists.

Every helper returns a new tuple and leaves its input untouched. Edited
instructions keep their ids, so edge memory recorded for them survives
reordering and insertion.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from ladderflow.core.instruction import Instruction, Opcode, next_instruction_id

PLACEHOLDER_SERIES = "X?"
PLACEHOLDER_PARALLEL = "Y?"


def _check_index(instructions: Sequence[Instruction], index: int) -> None:
    if not 0 <= index < len(instructions):
        raise IndexError(f"instruction index {index} out of range (0..{len(instructions) - 1})")


def update_instruction(
    instructions: Sequence[Instruction], index: int, **changes: Any
) -> tuple[Instruction, ...]:
    """Replace fields of the instruction at ``index``; ``id`` cannot change."""
    _check_index(instructions, index)
    if "id" in changes:
        raise ValueError("instruction id is immutable")
    if "args" in changes:
        changes["args"] = tuple(changes["args"])
    edited = list(instructions)
    edited[index] = replace(edited[index], **changes)
    return tuple(edited)


def delete_instruction(instructions: Sequence[Instruction], index: int) -> tuple[Instruction, ...]:
    _check_index(instructions, index)
    return tuple(instructions[:index]) + tuple(instructions[index + 1 :])


def insert_instruction(
    instructions: Sequence[Instruction],
    index: int,
    type: Opcode | str,
    value: str,
    args: Sequence[str] = (),
) -> tuple[Instruction, ...]:
    """Insert a new instruction after ``index`` (``-1`` inserts at the front)."""
    if not -1 <= index < len(instructions):
        raise IndexError(f"instruction index {index} out of range (-1..{len(instructions) - 1})")
    new = Instruction(
        id=next_instruction_id(instructions),
        type=type,
        value=value,
        args=tuple(args) or ((value,) if value else ()),
    )
    position = index + 1
    return tuple(instructions[:position]) + (new,) + tuple(instructions[position:])


def insert_series(instructions: Sequence[Instruction], index: int) -> tuple[Instruction, ...]:
    """Insert a placeholder AND contact after ``index``."""
    return insert_instruction(instructions, index, Opcode.AND, PLACEHOLDER_SERIES)


def insert_parallel(instructions: Sequence[Instruction], index: int) -> tuple[Instruction, ...]:
    """Insert a placeholder OR contact after ``index``."""
    return insert_instruction(instructions, index, Opcode.OR, PLACEHOLDER_PARALLEL)
