"""Tests for LadderRunner sessions."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from ladderflow.core import LadderRunner, SimulationState, Terminal, TimeMode
from ladderflow.core import runner as runner_module

from tests.conftest import program

SELF_HOLD = program(("LD", "X0"), ("OR", "Y0"), ("ANI", "X1"), ("OUT", "Y0"))
TIMER = program(("LD", "X0"), ("OUT", "T0", "K10"))


def _scan_ids(runner: LadderRunner, n: int = 100) -> list[int]:
    return [state.scan_id for state in runner.history.latest(n)]


class TestInputs:
    """Queued input patches."""

    def test_patch_applies_on_next_step_only(self):
        """Patched inputs are invisible until the next step."""
        runner = LadderRunner(SELF_HOLD)
        runner.patch({"X0": True})

        assert runner.current_state.bit("X0") is False
        runner.step()
        assert runner.current_state.io["Y0"] is True

        # Patched values persist in state; the queue itself is consumed.
        runner.patch({"X0": False})
        runner.step()
        assert runner.current_state.io["Y0"] is True

    def test_patch_registers(self):
        """Registers can be patched like bits."""
        runner = LadderRunner(program(("LD_EQ", "D0", "K3"), ("OUT", "Y0")))
        runner.patch(data={"D0": 3})

        assert runner.step().io["Y0"] is True

    def test_toggle_bit_returns_queued_value(self):
        """Toggling reads the queued value, not the committed one."""
        runner = LadderRunner(SELF_HOLD)

        assert runner.toggle_bit("X0") is True
        assert runner.toggle_bit("X0") is False
        assert runner.toggle_bit("X0") is True
        runner.step()
        assert runner.current_state.io["X0"] is True

    def test_stop_releases_self_hold(self):
        """Pressing stop drops the sealed-in output."""
        runner = LadderRunner(SELF_HOLD)
        runner.patch({"X0": True})
        runner.step()
        runner.patch({"X0": False, "X1": True})

        assert runner.step().io["Y0"] is False


class TestTimeModes:
    """Fixed-step and realtime clocks."""

    def test_default_is_fixed_step(self):
        runner = LadderRunner(TIMER)

        assert runner.time_mode == TimeMode.FIXED_STEP
        runner.step()
        assert runner.current_state.elapsed_ms == 100

    def test_fixed_step_drives_timers(self):
        """Each fixed step credits dt to running timers."""
        runner = LadderRunner(TIMER, SimulationState.initial(io={"X0": True}))
        runner.set_time_mode(TimeMode.FIXED_STEP, dt_ms=250)

        runner.run(3)
        assert runner.current_state.io["T0"] is False
        runner.step()
        assert runner.current_state.io["T0"] is True
        assert runner.current_state.timers["T0"] == 1000

    def test_negative_dt_rejected(self):
        with pytest.raises(ValueError, match="dt_ms"):
            LadderRunner(TIMER).set_time_mode(TimeMode.FIXED_STEP, dt_ms=-1)

    def test_realtime_uses_wall_clock(self, monkeypatch):
        """Realtime mode credits the measured wall-clock gap."""
        ticks = iter([10.0, 10.25, 10.3])
        fake_clock = SimpleNamespace(perf_counter=lambda: next(ticks))
        monkeypatch.setattr(runner_module, "time", fake_clock)

        runner = LadderRunner(TIMER, SimulationState.initial(io={"X0": True}))
        runner.set_time_mode(TimeMode.REALTIME)

        runner.step()
        assert runner.current_state.timers["T0"] == 250
        runner.step()
        assert runner.current_state.timers["T0"] == 300
        assert runner.current_state.elapsed_ms == 300


class TestRunHelpers:
    """run, run_for and run_until."""

    def test_run_cycles(self):
        runner = LadderRunner(SELF_HOLD)
        assert runner.run(5).scan_id == 5

    def test_run_for_advances_simulated_time(self):
        """run_for steps until the simulated clock has moved far enough."""
        runner = LadderRunner(TIMER, SimulationState.initial(io={"X0": True}))
        runner.set_time_mode(TimeMode.FIXED_STEP, dt_ms=300)

        state = runner.run_for(1000)
        assert state.scan_id == 4
        assert state.elapsed_ms == 1200
        assert state.io["T0"] is True

    def test_run_for_stops_when_clock_is_frozen(self):
        """A zero dt would loop forever, so run_for refuses it."""
        runner = LadderRunner(TIMER)
        runner.set_time_mode(TimeMode.FIXED_STEP, dt_ms=0)

        assert runner.run_for(500).scan_id == 1

    def test_run_until_predicate(self):
        """Stops on the first state matching the predicate."""
        runner = LadderRunner(TIMER, SimulationState.initial(io={"X0": True}))

        state = runner.run_until(lambda s: s.bit("T0"))
        assert state.scan_id == 10

    def test_run_until_gives_up_after_max_cycles(self):
        """Returns the last state when the predicate never matches."""
        runner = LadderRunner(TIMER)
        assert runner.run_until(lambda s: s.bit("T0"), max_cycles=7).scan_id == 7


class TestHistory:
    """Retained scan snapshots."""

    def test_history_starts_with_initial_state(self):
        """Scan 0 is retained from the start."""
        runner = LadderRunner(SELF_HOLD)

        assert _scan_ids(runner) == [0]
        assert runner.history.at(0) is runner.current_state

    def test_history_records_each_scan(self):
        runner = LadderRunner(SELF_HOLD)
        runner.run(3)

        assert _scan_ids(runner) == [0, 1, 2, 3]
        assert runner.history.at(3) is runner.current_state
        with pytest.raises(KeyError):
            runner.history.at(99)

    def test_history_limit_evicts_oldest(self):
        """The oldest snapshots drop once the limit is hit."""
        runner = LadderRunner(SELF_HOLD, history_limit=2)
        runner.run(4)

        assert _scan_ids(runner) == [3, 4]
        assert len(runner.history) == 2
        with pytest.raises(KeyError):
            runner.history.at(0)

    def test_invalid_history_limit(self):
        with pytest.raises(ValueError, match="history_limit"):
            LadderRunner(SELF_HOLD, history_limit=0)

    def test_empty_program_does_not_grow_history(self):
        """Stepping an empty program commits nothing."""
        runner = LadderRunner()
        before = runner.current_state

        assert runner.step() is before
        assert len(runner.history) == 1


class TestProgramAndDisplay:
    """Program loading and the derived grid."""

    def test_grid_is_cached_per_program(self):
        """The grid is laid out once per loaded program."""
        runner = LadderRunner(SELF_HOLD)

        assert runner.grid is runner.grid
        runner.load(TIMER)
        assert len(runner.grid[0]) == 2

    def test_load_resets_state_by_default(self):
        """Loading a program starts from a fresh state."""
        runner = LadderRunner(SELF_HOLD)
        runner.patch({"X0": True})
        runner.run(2)

        runner.load(TIMER)
        assert runner.current_state == SimulationState()
        assert runner.instructions == tuple(TIMER)
        assert _scan_ids(runner) == [0]

    def test_load_can_keep_state(self):
        """keep_state carries the current state over."""
        runner = LadderRunner(SELF_HOLD)
        runner.patch({"X0": True})
        runner.step()

        runner.load(TIMER, reset=False)
        assert runner.current_state.io["Y0"] is True
        assert runner.current_state.scan_id == 1

    def test_reset_discards_pending_inputs(self):
        """Reset drops queued patches along with history."""
        runner = LadderRunner(SELF_HOLD)
        runner.patch({"X0": True})
        runner.reset()

        assert runner.step().io["Y0"] is False

    def test_energized_follows_current_bits(self):
        """Power flow is computed from the committed bits."""
        runner = LadderRunner(SELF_HOLD)
        assert Terminal(2, 0, "in") not in runner.energized()

        runner.patch({"X0": True})
        runner.step()
        assert Terminal(2, 0, "in") in runner.energized()
