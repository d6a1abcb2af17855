from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


@dataclass(slots=True)
class ScheduledCall:
    """Handle for a callback registered with :class:`Scheduler`."""

    due_at_s: float
    callback: Callable[[], None] = field(repr=False)
    seq: int = 0
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        # No-op once fired.
        if not self.fired:
            self.cancelled = True


class Scheduler:
    """Cooperative delayed-call queue driven by an injected Clock.

    Nothing runs on its own: the owner calls :meth:`run_due` from its frame
    loop (or test script) and every due, uncancelled callback fires in due
    order. Calls sharing a due time fire in registration order.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._calls: list[ScheduledCall] = []
        self._seq = 0

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay_s < 0:
            raise ValueError("delay_s must be non-negative")
        self._seq += 1
        call = ScheduledCall(due_at_s=self._clock.now() + float(delay_s), callback=callback, seq=self._seq)
        self._calls.append(call)
        return call

    def run_due(self) -> int:
        now = self._clock.now()
        due = sorted(
            (c for c in self._calls if c.pending and c.due_at_s <= now),
            key=lambda c: (c.due_at_s, c.seq),
        )
        fired = 0
        for call in due:
            # An earlier callback may have cancelled a later one.
            if not call.pending:
                continue
            call.fired = True
            call.callback()
            fired += 1
        self._calls = [c for c in self._calls if c.pending]
        return fired
