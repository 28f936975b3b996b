"""Time modes for ladder simulation."""

from enum import Enum


class TimeMode(Enum):
    """Simulation time modes.

    FIXED_STEP: Each scan advances by a fixed dt, regardless of wall clock.
                Use for unit tests and deterministic replays.

    REALTIME: Each scan is credited with the wall-clock time since the
              previous scan. Use for interactive sessions.
    """

    FIXED_STEP = "fixed_step"
    REALTIME = "realtime"
