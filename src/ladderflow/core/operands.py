"""Operand classification and integer resolution."""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum

_TIMER_RE = re.compile(r"^T\d+$")
_COUNTER_RE = re.compile(r"^C\d+$")
_DATA_RE = re.compile(r"^D\d+$")
_CONSTANT_RE = re.compile(r"^K([+-]?\d+)$")
_INTEGER_RE = re.compile(r"^-?\d+$")

CONSTANT_PREFIX = "K"
PRESET_UNIT_MS = 100
"""Timer presets count in 100 ms units (``K10`` is one second)."""


class Namespace(Enum):
    """Device family an operand name addresses."""

    TIMER = "timer"
    COUNTER = "counter"
    DATA = "data"
    BIT = "bit"


def namespace_of(name: str) -> Namespace:
    """Classify a device name by its address prefix (``T0``, ``C3``, ``D100``)."""
    if _TIMER_RE.match(name):
        return Namespace.TIMER
    if _COUNTER_RE.match(name):
        return Namespace.COUNTER
    if _DATA_RE.match(name):
        return Namespace.DATA
    return Namespace.BIT


def resolve_operand(token: str, data: Mapping[str, int]) -> int:
    """Resolve an operand token to an integer.

    ``K<n>`` is a constant, a data register or named variable reads ``data``
    and a plain integer parses directly. Anything unresolved is 0.
    """
    if not token:
        return 0
    match = _CONSTANT_RE.match(token)
    if match:
        return int(match.group(1))
    if _DATA_RE.match(token):
        return int(data.get(token, 0))
    if _INTEGER_RE.match(token):
        return int(token)
    return int(data.get(token, 0))


def preset_ms(token: str, data: Mapping[str, int]) -> int:
    """Resolve a timer preset operand to milliseconds."""
    return resolve_operand(token, data) * PRESET_UNIT_MS
