"""ScanContext - Batched write context for a single scan cycle.

Collects every write made while interpreting one scan and commits them at the
end, so a scan allocates one new SimulationState instead of one per
instruction while later instructions still see earlier writes.
"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pyrsistent import pvector

if TYPE_CHECKING:
    from ladderflow.core.state import SimulationState

_FIELDS = ("io", "data", "timers", "counters", "edge_memory")


class ScanContext:
    """Batched write context for a single scan cycle.

    Each state map gets a pyrsistent evolver for the final commit and a plain
    pending dict layered over the original map for fast reads.

    Attributes:
        dt_ms: Elapsed milliseconds credited to timers during this scan.
        logic: The ephemeral logic stack, empty at the start of every scan.
        mps: The branch (MPS/MRD/MPP) stack, empty at the start of every scan.
    """

    __slots__ = ("_state", "_evolvers", "_pending", "_views", "dt_ms", "logic", "mps")

    def __init__(self, state: SimulationState, dt_ms: int = 0) -> None:
        self._state = state
        self._evolvers = {name: getattr(state, name).evolver() for name in _FIELDS}
        self._pending: dict[str, dict[str, Any]] = {name: {} for name in _FIELDS}
        self._views = {
            name: ChainMap(self._pending[name], getattr(state, name)) for name in _FIELDS
        }
        self.dt_ms = dt_ms
        self.logic: list[bool] = []
        self.mps: list[bool] = []

    def _write(self, field_name: str, key: str, value: Any) -> None:
        self._pending[field_name][key] = value
        self._evolvers[field_name][key] = value

    # =========================================================================
    # Logic stack
    # =========================================================================

    def push(self, value: bool) -> None:
        self.logic.append(bool(value))

    def pop(self) -> bool:
        """Pop the logic stack; an empty stack reads as False."""
        if self.logic:
            return self.logic.pop()
        return False

    def peek(self) -> bool:
        """Read the logic stack top without removing it; empty reads as False."""
        if self.logic:
            return self.logic[-1]
        return False

    # =========================================================================
    # Devices
    # =========================================================================

    @property
    def data(self) -> Mapping[str, int]:
        """Data registers as seen at this point of the scan."""
        return self._views["data"]

    def get_bit(self, name: str) -> bool:
        return bool(self._views["io"].get(name, False))

    def set_bit(self, name: str, value: bool) -> None:
        self._write("io", name, bool(value))

    def set_data(self, name: str, value: int) -> None:
        self._write("data", name, int(value))

    def get_timer(self, name: str) -> int:
        return self._views["timers"].get(name, 0)

    def set_timer(self, name: str, elapsed_ms: int) -> None:
        self._write("timers", name, elapsed_ms)

    def get_counter(self, name: str) -> int:
        return self._views["counters"].get(name, 0)

    def set_counter(self, name: str, count: int) -> None:
        self._write("counters", name, count)

    def rising_edge(self, key: str, value: bool) -> bool:
        """Record ``value`` under ``key`` and report a False -> True transition."""
        previous = self._views["edge_memory"].get(key, False)
        self._write("edge_memory", key, bool(value))
        return bool(value) and not previous

    def clear_edge(self, key: str) -> None:
        self._write("edge_memory", key, False)

    # =========================================================================
    # Commit
    # =========================================================================

    def commit(self) -> SimulationState:
        """Commit all pending writes and advance to the next scan."""
        updates: dict[str, Any] = {
            name: evolver.persistent() for name, evolver in self._evolvers.items()
        }
        new_state = self._state.set(mps_stack=pvector(self.mps), **updates)
        return new_state.next_scan(self.dt_ms)
