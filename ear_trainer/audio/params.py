"""Gain automation on the audio clock."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from enum import Enum


class RampKind(str, Enum):
    SET = "set"
    LINEAR = "linear"
    TARGET = "target"


@dataclass(frozen=True, slots=True, order=True)
class _Event:
    time: float
    seq: int
    kind: RampKind = field(compare=False)
    value: float = field(compare=False)
    time_constant: float = field(default=0.0, compare=False)


class GainParam:
    """A gain value described as a timeline of automation events.

    Events are evaluated lazily by :meth:`value_at`:

    - ``SET`` jumps to a value at its time.
    - ``LINEAR`` ramps from the previous event's value and time to its own.
    - ``TARGET`` approaches its value exponentially from its time until the
      next event, with the given time constant.
    """

    def __init__(self, value: float = 1.0) -> None:
        self._default = float(value)
        self._events: list[_Event] = []
        self._seq = 0

    def _insert(self, kind: RampKind, value: float, when: float, time_constant: float = 0.0) -> None:
        self._seq += 1
        bisect.insort(self._events, _Event(float(when), self._seq, kind, float(value), float(time_constant)))

    def set_value_at_time(self, value: float, when: float) -> None:
        self._insert(RampKind.SET, value, when)

    def linear_ramp_to_value_at_time(self, value: float, when: float) -> None:
        self._insert(RampKind.LINEAR, value, when)

    def set_target_at_time(self, target: float, when: float, time_constant: float) -> None:
        if time_constant <= 0:
            self.set_value_at_time(target, when)
            return
        self._insert(RampKind.TARGET, target, when, time_constant)

    def cancel_and_hold(self, when: float) -> float:
        """Drop every event at or after *when*, freezing the value reached there."""
        held = self.value_at(when)
        self._events = [ev for ev in self._events if ev.time < when]
        self.set_value_at_time(held, when)
        return held

    def restart_from(self, when: float) -> float:
        """Replace the whole timeline with the value reached at *when*.

        Only valid once nothing will be evaluated before *when* again.
        """
        held = self.value_at(when)
        self._events = []
        self.set_value_at_time(held, when)
        return held

    @property
    def events(self) -> int:
        return len(self._events)

    def value_at(self, when: float) -> float:
        value = self._default
        last_time = 0.0
        approach: _Event | None = None

        for event in self._events:
            if approach is not None:
                end = min(event.time, when)
                value = _approach(approach, value, end)
                last_time = end
                approach = None
            if event.time > when:
                if event.kind is RampKind.LINEAR:
                    span = event.time - last_time
                    if span <= 0:
                        return event.value
                    return value + (event.value - value) * ((when - last_time) / span)
                return value
            if event.kind is RampKind.TARGET:
                approach = event
            else:
                value = event.value
            last_time = event.time

        if approach is not None:
            return _approach(approach, value, when)
        return value


def _approach(event: _Event, start_value: float, when: float) -> float:
    elapsed = max(0.0, when - event.time)
    return event.value + (start_value - event.value) * math.exp(-elapsed / event.time_constant)
