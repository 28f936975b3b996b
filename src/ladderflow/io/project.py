"""JSON project files.

A project file holds the instruction list plus a small metadata block::

    {"instructions": [{"id": 1, "type": "LD", "value": "X0", "args": ["X0"]}, ...],
     "meta": {"version": "1.0", "date": "2026-01-31T12:00:00+00:00"}}

A bare JSON array of instruction records is also accepted on load.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ladderflow.core.instruction import Instruction

PROJECT_VERSION = "1.0"


class ProjectFormatError(ValueError):
    """Raised when project data is not a recognizable instruction list."""


def dump_project(
    instructions: Iterable[Instruction],
    *,
    date: datetime | None = None,
) -> dict[str, Any]:
    """Return the project record for ``instructions``."""
    stamp = date if date is not None else datetime.now(timezone.utc)
    return {
        "instructions": [inst.to_dict() for inst in instructions],
        "meta": {"version": PROJECT_VERSION, "date": stamp.isoformat()},
    }


def load_project_data(data: Any) -> list[Instruction]:
    """Return the instructions held by a decoded project record."""
    if isinstance(data, Mapping):
        records = data.get("instructions")
        if not isinstance(records, list):
            raise ProjectFormatError("Project has no 'instructions' array")
    elif isinstance(data, list):
        records = data
    else:
        raise ProjectFormatError("Project must be an object or an array of instructions")

    instructions: list[Instruction] = []
    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ProjectFormatError(f"Instruction {position} is not an object")
        try:
            instructions.append(Instruction.from_dict(record))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProjectFormatError(f"Invalid instruction {position}: {exc}") from exc
    return instructions


def loads_project(text: str) -> list[Instruction]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProjectFormatError(f"Project is not valid JSON: {exc}") from exc
    return load_project_data(data)


def load_project(path: str | Path) -> list[Instruction]:
    """Read instructions from a project file."""
    return loads_project(Path(path).read_text(encoding="utf-8"))


def save_project(path: str | Path, instructions: Iterable[Instruction]) -> Path:
    """Write ``instructions`` to ``path`` as a project file and return the path."""
    target = Path(path)
    target.write_text(json.dumps(dump_project(instructions), indent=2), encoding="utf-8")
    return target
