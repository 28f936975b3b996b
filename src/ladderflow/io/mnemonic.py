"""Mnemonic text lexer.

Turns instruction-list text into `Instruction` records::

    0   LD   X0        // start button
    1   OR   Y0
    2   ANI  X1
    3   OUT  Y0
        LD=  D0 K5
        OUT  T0 K10

One instruction per line. Empty lines and lines starting with ``//``, ``;``
or ``*`` are comments. The first token naming a known opcode anchors the
line, so leading step numbers are skipped. ``LD =`` / ``LD=`` (and the AND/OR
forms) are comparators. Lines without a known opcode are dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ladderflow.core.instruction import Instruction, Opcode

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("//", ";", "*")
INLINE_COMMENT_PREFIXES = ("//", ";")

_COMPARATORS = {
    Opcode.LD: Opcode.LD_EQ,
    Opcode.AND: Opcode.AND_EQ,
    Opcode.OR: Opcode.OR_EQ,
}
_MNEMONIC_NAMES = {Opcode.LD_EQ: "LD=", Opcode.AND_EQ: "AND=", Opcode.OR_EQ: "OR="}
_SPLIT = re.compile(r"\s+")


def _normalize(token: str) -> Opcode | None:
    upper = token.upper()
    if upper.endswith("=") and len(upper) > 1:
        base = Opcode.parse(upper[:-1])
        return _COMPARATORS.get(base) if base is not None else None
    return Opcode.parse(upper)


def parse_line(line: str, instruction_id: int) -> Instruction | None:
    """Lex one line; returns None for comments and lines without an opcode."""
    line = line.strip()
    if not line or line.startswith(COMMENT_PREFIXES):
        return None

    tokens = _SPLIT.split(line)
    for position, token in enumerate(tokens):
        opcode = _normalize(token)
        if opcode is not None:
            break
    else:
        logger.debug("No opcode on line %r; skipped", line)
        return None

    start = position + 1
    if start < len(tokens) and tokens[start] == "=" and opcode in _COMPARATORS:
        opcode = _COMPARATORS[opcode]
        start += 1

    args: list[str] = []
    for token in tokens[start:]:
        if token.startswith(INLINE_COMMENT_PREFIXES):
            break
        args.append(token)

    return Instruction(
        id=instruction_id,
        type=opcode,
        value=args[0] if args else "",
        args=tuple(args),
    )


def parse_mnemonic(text: str) -> list[Instruction]:
    """Lex a whole listing; ids are assigned 1, 2, 3... in program order."""
    instructions: list[Instruction] = []
    for line in text.splitlines():
        inst = parse_line(line, len(instructions) + 1)
        if inst is not None:
            instructions.append(inst)
    return instructions


def format_instruction(inst: Instruction) -> str:
    name = _MNEMONIC_NAMES.get(inst.type, str(inst.type))
    operands = inst.args or ((inst.value,) if inst.value else ())
    return " ".join((name, *operands))


def format_mnemonic(instructions: Iterable[Instruction]) -> str:
    """Write instructions back as listing text, one per line."""
    return "".join(f"{format_instruction(inst)}\n" for inst in instructions)
