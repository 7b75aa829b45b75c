"""
Scheduling Calculator — ordering timestamps and delay/TTL deadlines.

Deadlines are whole epoch seconds: ``int(now) + value_ms // 1000``.
Sub-second remainders are dropped, so a 1500 ms TTL expires one second
after the send. The ordering timestamp is wall-clock time in 100 µs units.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

Clock = Callable[[], float]

ORDERING_SCALE = 10000


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of resolving one delay/TTL value: a deadline or an error."""
    deadline: Optional[int] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


def ordering_timestamp(clock: Clock = time.time) -> int:
    """Return the row ordering timestamp for a message with no published_at."""
    return int(clock() * ORDERING_SCALE)


def _type_name(value: Any) -> str:
    return type(value).__name__


def resolve_deadline(field: str, value_ms: Any, now: float) -> ScheduleResult:
    """
    Turn a relative duration in milliseconds into an absolute deadline.

    ``None`` and ``0`` mean "no deadline". Booleans and floats are rejected
    even when they hold a whole number.
    """
    if not value_ms:
        return ScheduleResult()

    label = field.replace("_", " ").capitalize()
    if isinstance(value_ms, bool) or not isinstance(value_ms, int):
        return ScheduleResult(
            error=f'{label} must be integer but got: "{_type_name(value_ms)}"',
        )
    if value_ms <= 0:
        return ScheduleResult(
            error=f'{label} must be positive integer but got: "{value_ms}"',
        )

    return ScheduleResult(deadline=int(now) + value_ms // 1000)
