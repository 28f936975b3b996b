"""Text and file formats for instruction lists."""

from ladderflow.io.mnemonic import format_mnemonic, parse_line, parse_mnemonic
from ladderflow.io.project import (
    ProjectFormatError,
    dump_project,
    load_project,
    load_project_data,
    loads_project,
    save_project,
)

__all__ = [
    "parse_mnemonic",
    "parse_line",
    "format_mnemonic",
    "ProjectFormatError",
    "dump_project",
    "load_project",
    "load_project_data",
    "loads_project",
    "save_project",
]
