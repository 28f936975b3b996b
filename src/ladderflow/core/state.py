"""Immutable simulation state for the scan interpreter.

All state transitions produce new SimulationState instances; a session
replaces its state wholesale with the value returned by each scan.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pyrsistent import PMap, PRecord, PVector, field, pmap, pvector


class SimulationState(PRecord):
    """Immutable snapshot of the simulated PLC.

    Each namespace has its own map, so a timer ``T0`` and a data register
    or bit with the same text never share an entry.

    Attributes:
        io: Bit devices (inputs, outputs, internal relays, timer/counter done bits).
        data: Integer registers and named variables.
        timers: Elapsed milliseconds per timer.
        counters: Current count per counter.
        edge_memory: Previous enable values for edge-triggered operations.
        mps_stack: Branch stack left over at the end of the last scan.
        scan_id: Number of scans executed.
        elapsed_ms: Simulated milliseconds accumulated over all scans.
    """

    io = field(type=PMap, initial=pmap())
    data = field(type=PMap, initial=pmap())
    timers = field(type=PMap, initial=pmap())
    counters = field(type=PMap, initial=pmap())
    edge_memory = field(type=PMap, initial=pmap())
    mps_stack = field(type=PVector, initial=pvector())
    scan_id = field(type=int, initial=0)
    elapsed_ms = field(type=int, initial=0)

    @classmethod
    def initial(
        cls,
        io: Mapping[str, bool] | None = None,
        data: Mapping[str, int] | None = None,
    ) -> SimulationState:
        """Return a fresh state with optional starting bits and registers."""
        return cls(io=pmap(io or {}), data=pmap(data or {}))

    def bit(self, name: str) -> bool:
        return bool(self.io.get(name, False))

    def register(self, name: str) -> int:
        return int(self.data.get(name, 0))

    def with_io(self, updates: Mapping[str, bool]) -> SimulationState:
        """Return new state with updated bits. Original unchanged."""
        return self.set(io=self.io.update({k: bool(v) for k, v in updates.items()}))

    def with_data(self, updates: Mapping[str, int]) -> SimulationState:
        """Return new state with updated registers. Original unchanged."""
        return self.set(data=self.data.update({k: int(v) for k, v in updates.items()}))

    def next_scan(self, dt_ms: int) -> SimulationState:
        """Return new state for the next scan cycle."""
        e = self.evolver()
        e.set("scan_id", self.scan_id + 1)
        e.set("elapsed_ms", self.elapsed_ms + dt_ms)
        return cast(SimulationState, e.persistent())

    def to_dict(self) -> dict[str, Any]:
        """Plain-container view, keyed the way the wire format spells it."""
        return {
            "io": dict(self.io),
            "data": dict(self.data),
            "timers": dict(self.timers),
            "counters": dict(self.counters),
            "edgeMemory": dict(self.edge_memory),
            "mpsStack": list(self.mps_stack),
        }
