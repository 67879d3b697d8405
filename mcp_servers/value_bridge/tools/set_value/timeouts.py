"""Timeout budget for a set_value round-trip.

Two numbers are resolved per call:
- the per-call timeout (explicit, or estimated from the payload length),
- a protocol buffer on top of it, so the transport never gives up before the
  extension's own deadline has elapsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from ..base import ValidationError

AUTO = "auto"

EXPLICIT_MIN_MS = 5_000
EXPLICIT_MAX_MS = 600_000

BASE_TIMEOUT_MS = 15_000
AUTO_MAX_MS = 600_000
SHORT_PAYLOAD_BYTES = 100
BYTES_PER_SECOND = 30

BUFFER_RATIO = 0.25
BUFFER_MIN_MS = 15_000
BUFFER_MAX_MS = 60_000

# (upper bound inclusive, bonus ms); long inputs are typed progressively on the far side.
_PROGRESSIVE_STEPS: tuple[tuple[int, int], ...] = (
    (500, 0),
    (1000, 10_000),
    (2000, 20_000),
)
_PROGRESSIVE_MAX_BONUS_MS = 30_000

_DECIMAL_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True, slots=True)
class TimeoutBudget:
    timeout_ms: int
    buffer_ms: int
    auto: bool

    @property
    def combined_ms(self) -> int:
        return self.timeout_ms + self.buffer_ms


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


def progressive_bonus(length: int) -> int:
    for upper, bonus in _PROGRESSIVE_STEPS:
        if length <= upper:
            return bonus
    return _PROGRESSIVE_MAX_BONUS_MS


def estimate_timeout(length: int) -> int:
    """Estimate the per-call timeout (ms) from the serialized payload length."""
    if length <= SHORT_PAYLOAD_BYTES:
        return BASE_TIMEOUT_MS
    text_factor = ((length - SHORT_PAYLOAD_BYTES) // BYTES_PER_SECOND) * 1000
    return _clamp(BASE_TIMEOUT_MS + text_factor + progressive_bonus(length), BASE_TIMEOUT_MS, AUTO_MAX_MS)


def protocol_buffer(timeout_ms: int) -> int:
    return _clamp(int(timeout_ms * BUFFER_RATIO), BUFFER_MIN_MS, BUFFER_MAX_MS)


def parse_explicit_timeout(raw: str) -> int:
    if not _DECIMAL_RE.match(raw):
        raise ValidationError(
            "timeout must be 'auto' or a timeout in milliseconds",
            suggestion="Use timeout='auto' or a string like '30000'",
            details={"timeout": raw},
        )
    value = int(raw)
    if value < EXPLICIT_MIN_MS or value > EXPLICIT_MAX_MS:
        raise ValidationError(
            f"timeout must be between {EXPLICIT_MIN_MS} and {EXPLICIT_MAX_MS} milliseconds",
            details={"timeout": value},
        )
    return value


def resolve_timeout(spec: Any, payload_length: int) -> TimeoutBudget:
    """Resolve a TimeoutSpec ("auto" or decimal milliseconds) into a budget."""
    if spec is None:
        spec = AUTO
    if not isinstance(spec, str):
        raise ValidationError(
            "timeout must be a string: 'auto' or milliseconds",
            details={"timeoutType": type(spec).__name__},
        )
    if spec == AUTO:
        timeout_ms = estimate_timeout(payload_length)
        return TimeoutBudget(timeout_ms=timeout_ms, buffer_ms=protocol_buffer(timeout_ms), auto=True)
    timeout_ms = parse_explicit_timeout(spec)
    return TimeoutBudget(timeout_ms=timeout_ms, buffer_ms=protocol_buffer(timeout_ms), auto=False)


__all__ = [
    "AUTO",
    "TimeoutBudget",
    "estimate_timeout",
    "parse_explicit_timeout",
    "progressive_bonus",
    "protocol_buffer",
    "resolve_timeout",
]
