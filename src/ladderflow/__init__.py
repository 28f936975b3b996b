"""ladderflow - layout, simulation and power flow for ladder instruction lists."""

import logging

from ladderflow.core import (
    Grid,
    GridCell,
    Instruction,
    LadderRunner,
    Opcode,
    SimulationState,
    Terminal,
    TimeMode,
    energize,
    format_grid,
    layout,
    step,
)
from ladderflow.io import load_project, parse_mnemonic, save_project

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "layout",
    "step",
    "energize",
    "format_grid",
    "Instruction",
    "Opcode",
    "Grid",
    "GridCell",
    "Terminal",
    "SimulationState",
    "LadderRunner",
    "TimeMode",
    "parse_mnemonic",
    "load_project",
    "save_project",
]
