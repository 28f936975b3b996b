"""LadderRunner - one simulation session over an instruction list.

The runner owns a SimulationState and replaces it wholesale with the result
of every scan. The consumer drives execution via step(), injecting inputs
between scans with patch() / toggle_bit().

The runner is not thread-safe; calls against one runner must be serialized.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping

from ladderflow.core.grid import Grid
from ladderflow.core.history import History
from ladderflow.core.instruction import Instruction
from ladderflow.core.interpreter import step as run_scan
from ladderflow.core.layout import layout
from ladderflow.core.power_flow import Terminal, energize
from ladderflow.core.state import SimulationState
from ladderflow.core.time_mode import TimeMode

logger = logging.getLogger(__name__)

DEFAULT_DT_MS = 100


class LadderRunner:
    """Scan-by-scan execution of one instruction list.

    Attributes:
        current_state: The current SimulationState snapshot.
        history: Retained SimulationState snapshots.
        time_mode: FIXED_STEP (default, ``dt_ms`` per scan) or REALTIME.
    """

    def __init__(
        self,
        instructions: Iterable[Instruction] | None = None,
        initial_state: SimulationState | None = None,
        *,
        history_limit: int | None = None,
    ) -> None:
        """Create a new LadderRunner.

        Args:
            instructions: Program in execution order, or None for an empty program.
            initial_state: Starting state. Defaults to an empty SimulationState.
            history_limit: Max retained snapshots including the initial state.
                Use None for unbounded history.
        """
        if history_limit is not None and history_limit < 1:
            raise ValueError("history_limit must be >= 1 or None")

        self._instructions: tuple[Instruction, ...] = tuple(instructions or ())
        self._grid: Grid | None = None
        self._state = initial_state if initial_state is not None else SimulationState()
        self._history_limit = history_limit
        self._history = History(self._state, limit=history_limit)
        self._pending_io: dict[str, bool] = {}
        self._pending_data: dict[str, int] = {}
        self._time_mode = TimeMode.FIXED_STEP
        self._dt_ms = DEFAULT_DT_MS
        self._last_step_time: float | None = None

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return self._instructions

    @property
    def current_state(self) -> SimulationState:
        return self._state

    @property
    def history(self) -> History:
        return self._history

    @property
    def time_mode(self) -> TimeMode:
        return self._time_mode

    @property
    def grid(self) -> Grid:
        """Layout of the loaded program, computed once per program."""
        if self._grid is None:
            self._grid = layout(self._instructions)
        return self._grid

    def energized(self) -> frozenset[Terminal]:
        """Energized terminals of `grid` for the current bit state."""
        return energize(self.grid, self._state.io)

    def load(self, instructions: Iterable[Instruction], *, reset: bool = True) -> None:
        """Replace the program, by default starting over from an empty state."""
        self._instructions = tuple(instructions)
        self._grid = None
        logger.debug("Loaded program with %d instructions", len(self._instructions))
        if reset:
            self.reset()

    def reset(self, state: SimulationState | None = None) -> None:
        """Discard pending inputs and history and restart from ``state``."""
        self._state = state if state is not None else SimulationState()
        self._history._reset(self._state)
        self._pending_io.clear()
        self._pending_data.clear()
        self._last_step_time = None

    def set_time_mode(self, mode: TimeMode, dt_ms: int = DEFAULT_DT_MS) -> None:
        """Set the time mode for simulation.

        Args:
            mode: TimeMode.FIXED_STEP or TimeMode.REALTIME.
            dt_ms: Milliseconds per scan (only used for FIXED_STEP mode).
        """
        if dt_ms < 0:
            raise ValueError("dt_ms must be >= 0")
        self._time_mode = mode
        self._dt_ms = dt_ms
        if mode == TimeMode.REALTIME:
            self._last_step_time = time.perf_counter()

    def patch(
        self,
        io: Mapping[str, bool] | None = None,
        data: Mapping[str, int] | None = None,
    ) -> None:
        """Queue bit and register values for the next scan.

        Values are applied at the start of the next step() call, then cleared.
        """
        if io:
            self._pending_io.update({name: bool(value) for name, value in io.items()})
        if data:
            self._pending_data.update({name: int(value) for name, value in data.items()})

    def toggle_bit(self, name: str) -> bool:
        """Queue the inverse of a bit for the next scan and return the new value."""
        current = self._pending_io.get(name, self._state.bit(name))
        self._pending_io[name] = not current
        return not current

    def _calculate_dt(self) -> int:
        """Calculate scan delta time based on current time mode."""
        if self._time_mode == TimeMode.REALTIME:
            now = time.perf_counter()
            if self._last_step_time is None:
                self._last_step_time = now
            dt_ms = round((now - self._last_step_time) * 1000)
            self._last_step_time = now
            return dt_ms
        return self._dt_ms

    def step(self) -> SimulationState:
        """Execute one full scan cycle and return the committed state."""
        state = self._state
        if self._pending_io:
            state = state.with_io(self._pending_io)
        if self._pending_data:
            state = state.with_data(self._pending_data)
        self._pending_io.clear()
        self._pending_data.clear()

        next_state = run_scan(self._instructions, state, self._calculate_dt())
        if next_state.scan_id != self._state.scan_id:
            self._history._append(next_state)
        self._state = next_state
        return self._state

    def run(self, cycles: int) -> SimulationState:
        """Execute ``cycles`` scans and return the final state."""
        for _ in range(cycles):
            self.step()
        return self._state

    def run_for(self, ms: int) -> SimulationState:
        """Run until simulated time advances by at least ``ms`` milliseconds.

        Stops early if scans do not advance the clock (empty program or zero dt).
        """
        target = self._state.elapsed_ms + ms
        while self._state.elapsed_ms < target:
            before = self._state.elapsed_ms
            self.step()
            if self._state.elapsed_ms == before:
                break
        return self._state

    def run_until(
        self,
        predicate: Callable[[SimulationState], bool],
        max_cycles: int = 10000,
    ) -> SimulationState:
        """Run until predicate returns True or max_cycles reached."""
        for _ in range(max_cycles):
            self.step()
            if predicate(self._state):
                break
        return self._state
