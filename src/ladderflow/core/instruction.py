"""Instruction records for mnemonic instruction lists.

An instruction list is a plain sequence of `Instruction` values in program
order. The layout engine, the scan interpreter and the power-flow analyzer all
share the opcode vocabulary and category sets defined here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Opcode(str, Enum):
    """Supported instruction opcodes.

    Members compare equal to their plain string names, so records loaded
    from JSON can be matched without conversion.
    """

    LD = "LD"
    LDI = "LDI"
    AND = "AND"
    ANI = "ANI"
    OR = "OR"
    ORI = "ORI"
    OUT = "OUT"
    ORB = "ORB"
    ANB = "ANB"
    MOV = "MOV"
    RST = "RST"
    LD_EQ = "LD_EQ"
    AND_EQ = "AND_EQ"
    OR_EQ = "OR_EQ"
    MPS = "MPS"
    MRD = "MRD"
    MPP = "MPP"
    MOVP = "MOVP"
    SET = "SET"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> Opcode | None:
        """Return the opcode named by ``raw`` (case-insensitive), or None."""
        try:
            return cls(raw.upper())
        except ValueError:
            return None


START_OPS = frozenset({Opcode.LD, Opcode.LDI, Opcode.LD_EQ})
PARALLEL_OPS = frozenset({Opcode.OR, Opcode.ORI, Opcode.OR_EQ})
COIL_OPS = frozenset({Opcode.OUT, Opcode.MOV, Opcode.MOVP, Opcode.RST, Opcode.SET})
SERIES_OPS = frozenset({Opcode.AND, Opcode.ANI, Opcode.AND_EQ}) | COIL_OPS
BLOCK_OPS = frozenset({Opcode.ORB, Opcode.ANB})
STACK_OPS = frozenset({Opcode.MPS, Opcode.MRD, Opcode.MPP})
COMPARATOR_OPS = frozenset({Opcode.LD_EQ, Opcode.AND_EQ, Opcode.OR_EQ})

# Contacts, by how they conduct for a given bit value.
NORMALLY_OPEN_OPS = frozenset({Opcode.LD, Opcode.AND, Opcode.OR})
NORMALLY_CLOSED_OPS = frozenset({Opcode.LDI, Opcode.ANI, Opcode.ORI})


@dataclass(frozen=True)
class Instruction:
    """One mnemonic instruction.

    Attributes:
        id: Stable identity, used to key edge-detection memory.
        type: Opcode. Unknown opcode names are kept as plain strings and are
            inert in every engine component.
        value: Primary operand (``"X0"``, ``"K10"``, ``"iStep"``); may be empty.
        args: All operands in order. ``args[0]`` normally mirrors ``value``.
    """

    id: int
    type: Opcode | str
    value: str = ""
    args: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def arg(self, index: int, default: str = "") -> str:
        """Return operand ``index`` or ``default`` when absent."""
        if 0 <= index < len(self.args):
            return self.args[index]
        return default

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Instruction:
        """Build an instruction from its wire record ``{id, type, value, args?}``."""
        raw_type = str(data["type"])
        opcode = Opcode.parse(raw_type)
        args = data.get("args") or ()
        return cls(
            id=int(data["id"]),
            type=opcode if opcode is not None else raw_type,
            value=str(data.get("value", "")),
            args=tuple(str(a) for a in args),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire record; ``args`` is omitted when empty."""
        record: dict[str, Any] = {"id": self.id, "type": str(self.type), "value": self.value}
        if self.args:
            record["args"] = list(self.args)
        return record


def next_instruction_id(instructions: Sequence[Instruction]) -> int:
    """Return an id not used by any instruction in ``instructions``."""
    return max((inst.id for inst in instructions), default=0) + 1
