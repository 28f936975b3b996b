"""Step-sequencer and self-holding circuit examples.

The sequencer keeps its step number in the ``iStep`` variable:

- step 0: wait for the start button ``X0``, then go to step 10
- step 10: lamp ``Y0`` on; wait for the sensor ``X1``, then go to step 20
- step 20: lamp ``Y0`` off, done lamp ``Y1`` on

``M0`` is an init flag so that ``iStep`` is cleared exactly once.
"""

from __future__ import annotations

from ladderflow.core.instruction import Instruction
from ladderflow.io.mnemonic import parse_mnemonic

STATE_MACHINE_LISTING = """\
// init
LDI   M0
MOVP  K0 iStep
SET   M0
// step 0
LD=   iStep K0
AND   X0
MOVP  K10 iStep
// step 10
LD=   iStep K10
SET   Y0
LD=   iStep K10
AND   X1
MOVP  K20 iStep
// step 20
LD=   iStep K20
RST   Y0
SET   Y1
"""

SELF_HOLD_LISTING = """\
LD    X0    ; start
OR    Y0    ; hold
ANI   X1    ; stop
OUT   Y0
"""


def state_machine_program() -> list[Instruction]:
    return parse_mnemonic(STATE_MACHINE_LISTING)


def self_hold_program() -> list[Instruction]:
    return parse_mnemonic(SELF_HOLD_LISTING)
