"""Cooperative wall-clock timers driven by the main loop."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Callable

from ear_trainer.clock import Clock


@dataclass
class CancelToken:
    """Shared by a batch of timers; cancelling it turns all of them into no-ops."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(order=True)
class TimerHandle:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    token: CancelToken | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled and not (self.token is not None and self.token.cancelled)


class TimerQueue:
    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._heap: list[TimerHandle] = []
        self._seq = 0

    def now(self) -> float:
        return self._clock.now()

    def call_later(self, delay_s: float, callback: Callable[[], None], token: CancelToken | None = None) -> TimerHandle:
        self._seq += 1
        handle = TimerHandle(self._clock.now() + max(0.0, delay_s), self._seq, callback, token)
        heapq.heappush(self._heap, handle)
        return handle

    def pending(self) -> int:
        return sum(1 for handle in self._heap if handle.active)

    def run_due(self) -> int:
        """Fire every timer that is due, in order; callbacks may arm new timers."""
        fired = 0
        now = self._clock.now()
        while self._heap and self._heap[0].due <= now:
            handle = heapq.heappop(self._heap)
            if not handle.active:
                continue
            handle.cancelled = True
            handle.callback()
            fired += 1
        return fired

    def clear(self) -> None:
        for handle in self._heap:
            handle.cancel()
        self._heap.clear()
