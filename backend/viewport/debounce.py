from __future__ import annotations

import time
from typing import Callable, Generic, TypeVar


T = TypeVar("T")

DEBOUNCE_DELAY_MS = 300.0


class ViewportDebouncer(Generic[T]):
    """
    Collapse bursts of viewport-change events into one "settled" event.

    Pure timing policy: no threads or timers. The caller pushes every change and
    polls from its own loop/tick; only the most recent event survives.
    """

    def __init__(
        self,
        delay_ms: float = DEBOUNCE_DELAY_MS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay_ms = float(delay_ms)
        self._clock = clock
        self._latest: T | None = None
        self._pushed_at: float | None = None

    def push(self, event: T) -> None:
        # A newer event supersedes any pending one.
        self._latest = event
        self._pushed_at = self._clock()

    def pending(self) -> bool:
        return self._pushed_at is not None

    def poll(self) -> T | None:
        """
        Return the pending event once it has been quiet for `delay_ms`, else None.
        """
        if self._pushed_at is None:
            return None
        elapsed_ms = (self._clock() - self._pushed_at) * 1000.0
        if elapsed_ms < self.delay_ms:
            return None
        event = self._latest
        self._latest = None
        self._pushed_at = None
        return event

    def cancel(self) -> None:
        self._latest = None
        self._pushed_at = None
