"""Ladder-logic engine.

Three pure functions over one instruction vocabulary:
    layout(instructions) -> Grid
    step(instructions, previous_state, dt_ms) -> SimulationState
    energize(grid, io_state) -> frozenset[Terminal]

LadderRunner wraps them into a session that owns one SimulationState.
"""

from ladderflow.core.context import ScanContext
from ladderflow.core.editor import (
    delete_instruction,
    insert_instruction,
    insert_parallel,
    insert_series,
    update_instruction,
)
from ladderflow.core.grid import Connections, Grid, GridCell
from ladderflow.core.grid_formatter import GridFormatter, format_grid
from ladderflow.core.instruction import Instruction, Opcode
from ladderflow.core.interpreter import step
from ladderflow.core.layout import layout
from ladderflow.core.operands import Namespace, namespace_of, resolve_operand
from ladderflow.core.power_flow import Terminal, energize, is_energized
from ladderflow.core.runner import LadderRunner
from ladderflow.core.state import SimulationState
from ladderflow.core.time_mode import TimeMode

__all__ = [
    # Engine
    "layout",
    "step",
    "energize",
    "is_energized",
    # Model
    "Instruction",
    "Opcode",
    "Grid",
    "GridCell",
    "Connections",
    "Terminal",
    "SimulationState",
    "ScanContext",
    # Operands
    "Namespace",
    "namespace_of",
    "resolve_operand",
    # Session
    "LadderRunner",
    "TimeMode",
    # Editing and display
    "update_instruction",
    "delete_instruction",
    "insert_instruction",
    "insert_series",
    "insert_parallel",
    "GridFormatter",
    "format_grid",
]
