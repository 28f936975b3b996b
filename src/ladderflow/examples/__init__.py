"""Ready-made instruction lists for demos and tests."""

from ladderflow.examples.state_machine import (
    SELF_HOLD_LISTING,
    STATE_MACHINE_LISTING,
    self_hold_program,
    state_machine_program,
)

__all__ = [
    "SELF_HOLD_LISTING",
    "STATE_MACHINE_LISTING",
    "self_hold_program",
    "state_machine_program",
]
