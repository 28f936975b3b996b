"""Tests for the bundled step-sequencer and self-hold examples."""

from __future__ import annotations

import pytest

from ladderflow.core import LadderRunner, Opcode, layout
from ladderflow.examples import self_hold_program, state_machine_program


@pytest.fixture
def sequencer() -> LadderRunner:
    return LadderRunner(state_machine_program())


def test_listing_parses_to_fourteen_instructions() -> None:
    instructions = state_machine_program()

    assert [inst.id for inst in instructions] == list(range(1, 15))
    assert instructions[3].type is Opcode.LD_EQ
    assert instructions[3].args == ("iStep", "K0")


def test_first_scan_initializes_step(sequencer: LadderRunner) -> None:
    """The first scan loads the initial step number."""
    state = sequencer.step()

    assert state.io["M0"] is True
    assert state.data["iStep"] == 0
    assert state.bit("Y0") is False


def test_start_button_enters_step_10(sequencer: LadderRunner) -> None:
    sequencer.step()
    sequencer.patch({"X0": True})
    state = sequencer.step()

    assert state.data["iStep"] == 10
    assert state.io["Y0"] is True


def test_sensor_finishes_sequence(sequencer: LadderRunner) -> None:
    """The sensor input moves the sequence to its last step."""
    sequencer.step()
    sequencer.patch({"X0": True})
    sequencer.step()
    sequencer.patch({"X0": False, "X1": True})
    state = sequencer.step()

    assert state.data["iStep"] == 20
    assert state.io["Y0"] is False
    assert state.io["Y1"] is True

    # Nothing moves once the sequence is done.
    assert sequencer.run(3).data["iStep"] == 20


def test_init_runs_only_once(sequencer: LadderRunner) -> None:
    """The init rung does not fire after the first scan."""
    sequencer.step()
    sequencer.patch(data={"iStep": 10})

    assert sequencer.step().data["iStep"] == 10


def test_sequencer_lays_out(sequencer: LadderRunner) -> None:
    placed = [c for row in sequencer.grid for c in row if c.instruction is not None]
    assert sorted(c.source_index for c in placed) == list(range(14))


def test_self_hold_example() -> None:
    runner = LadderRunner(self_hold_program())
    runner.patch({"X0": True})
    runner.step()
    runner.patch({"X0": False})

    assert runner.step().io["Y0"] is True
    assert len(layout(self_hold_program())) == 2
