from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

TickCallback = Callable[[int], None]
ExpireCallback = Callable[[], None]


class Clock(Protocol):
    """Source of monotonic seconds; rounds never read wall time directly."""

    def now(self) -> float: ...


class RealClock:
    def now(self) -> float:
        return time.monotonic()


@dataclass(slots=True)
class TimerHandle:
    """Identity of one countdown started by a RoundTimer."""

    handle_id: int
    duration_s: int
    started_at_s: float
    on_tick: TickCallback
    on_expire: ExpireCallback
    remaining: int
    cancelled: bool = False


class RoundTimer:
    """One-second countdown driven by an injected clock.

    The timer does not own a thread.  The frame loop calls :meth:`update`,
    which delivers every whole-second tick that has elapsed since the last
    call, in order, and then the expiry.  Callbacks are bound to the handle
    returned by :meth:`start`; once that handle is cancelled or replaced, no
    further callback fires for it, even part-way through an ``update``.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._active: TimerHandle | None = None
        self._ids = itertools.count(1)

    @property
    def running(self) -> bool:
        return self._active is not None

    @property
    def active_handle(self) -> TimerHandle | None:
        return self._active

    def start(self, duration_s: int, on_tick: TickCallback, on_expire: ExpireCallback) -> TimerHandle:
        if int(duration_s) != duration_s or duration_s <= 0:
            raise ValueError("duration_s must be a positive whole number of seconds")

        self.cancel()
        handle = TimerHandle(
            handle_id=next(self._ids),
            duration_s=int(duration_s),
            started_at_s=self._clock.now(),
            on_tick=on_tick,
            on_expire=on_expire,
            remaining=int(duration_s),
        )
        self._active = handle
        on_tick(handle.remaining)
        return handle

    def cancel(self) -> None:
        handle = self._active
        if handle is None:
            return
        handle.cancelled = True
        self._active = None

    def update(self) -> None:
        handle = self._active
        if handle is None:
            return

        elapsed = int(self._clock.now() - handle.started_at_s)
        due = max(0, handle.duration_s - elapsed)

        while handle.remaining > due:
            if not self._is_live(handle):
                return
            handle.remaining -= 1
            handle.on_tick(handle.remaining)

        if handle.remaining == 0 and self._is_live(handle):
            self._active = None
            handle.on_expire()

    def _is_live(self, handle: TimerHandle) -> bool:
        return not handle.cancelled and handle is self._active
