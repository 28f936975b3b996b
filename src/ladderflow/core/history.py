"""Retained SimulationState snapshots for LadderRunner."""

from __future__ import annotations

from collections import deque

from ladderflow.core.state import SimulationState


class History:
    """Stores retained scan snapshots with optional oldest-first eviction."""

    def __init__(self, initial_state: SimulationState, *, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("history_limit must be >= 1 or None")

        self._limit = limit
        self._order: deque[int] = deque([initial_state.scan_id])
        self._by_scan_id: dict[int, SimulationState] = {initial_state.scan_id: initial_state}

    def at(self, scan_id: int) -> SimulationState:
        """Return snapshot for a retained scan id."""
        try:
            return self._by_scan_id[scan_id]
        except KeyError as exc:
            raise KeyError(scan_id) from exc

    def latest(self, n: int) -> list[SimulationState]:
        """Return up to the latest n retained snapshots (oldest -> newest)."""
        if n <= 0:
            return []
        return [self._by_scan_id[scan_id] for scan_id in list(self._order)[-n:]]

    def __len__(self) -> int:
        return len(self._order)

    def _append(self, state: SimulationState) -> None:
        """Append a newly committed state; for runner-internal use only."""
        scan_id = state.scan_id
        if self._order and scan_id <= self._order[-1]:
            raise ValueError(
                f"scan_id must be strictly increasing; got {scan_id} after {self._order[-1]}"
            )
        self._order.append(scan_id)
        self._by_scan_id[scan_id] = state
        if self._limit is not None:
            while len(self._order) > self._limit:
                del self._by_scan_id[self._order.popleft()]

    def _reset(self, state: SimulationState) -> None:
        self._order = deque([state.scan_id])
        self._by_scan_id = {state.scan_id: state}
