"""Lookahead note scheduling on the audio clock, with staff highlighting.

Audio start and stop times are handed to the voices up front. Staff
highlighting runs on wall-clock timers that are derived from the audio
schedule through one clock offset per batch. Every visual callback checks
the batch's cancellation token before acting, since a timer that is already
queued cannot be taken back once the audio has been stopped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from ear_trainer import config
from ear_trainer.audio.context import AudioOutput
from ear_trainer.audio.voice import VoiceFactory, schedule_fixed
from ear_trainer.music.exercises import ExerciseNote
from ear_trainer.music.notes import duration_seconds
from ear_trainer.playback.registry import ActiveVoiceRegistry
from ear_trainer.playback.timers import CancelToken, TimerHandle, TimerQueue
from ear_trainer.utils.math_utils import clamp, to_float

logger = logging.getLogger(__name__)


class StaffView(Protocol):
    highlighted: int | None

    def set_notes(self, notes: Sequence[ExerciseNote]) -> None:
        ...

    def highlight(self, position: int) -> None:
        ...

    def clear(self) -> None:
        ...


@dataclass(frozen=True, slots=True)
class ScheduledEvent:
    note: ExerciseNote
    start_time: float
    duration_s: float
    position: int

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration_s


def clamp_tempo(bpm: object) -> int:
    value = to_float(bpm, config.DEFAULT_TEMPO)
    return int(round(clamp(value, config.TEMPO_MIN, config.TEMPO_MAX)))


def compute_schedule(notes: Sequence[ExerciseNote], bpm: object, start_at: float) -> list[ScheduledEvent]:
    """Back-to-back events: each note starts where the previous one ends."""
    tempo = clamp_tempo(bpm)
    events: list[ScheduledEvent] = []
    cursor = start_at
    for position, note in enumerate(notes):
        duration = duration_seconds(note.duration, tempo)
        events.append(ScheduledEvent(note, cursor, duration, position))
        cursor += duration
    return events


class NoteScheduler:
    def __init__(
        self,
        output: AudioOutput,
        voices: VoiceFactory,
        registry: ActiveVoiceRegistry,
        timers: TimerQueue,
        staff: StaffView,
    ) -> None:
        self._output = output
        self._voices = voices
        self._registry = registry
        self._timers = timers
        self._staff = staff
        self._token = CancelToken()
        self._completion: TimerHandle | None = None
        self.events: list[ScheduledEvent] = []

    @property
    def is_playing(self) -> bool:
        return self._completion is not None and self._completion.active

    def play_sequence(
        self,
        notes: Sequence[ExerciseNote],
        bpm: object,
        on_complete: Callable[[], None] | None = None,
    ) -> list[ScheduledEvent]:
        self.stop()
        token = self._token

        audio_now = self._output.now()
        # One offset per batch keeps every wall-clock delay on the same footing.
        offset = self._timers.now() - audio_now
        events = compute_schedule(notes, bpm, audio_now + config.LEAD_IN_SEC)
        self.events = events
        if not events:
            return events

        for event in events:
            voice = self._voices.create(event.note.note)
            self._registry.add(voice)
            schedule_fixed(voice, event.start_time, event.duration_s)
            highlight_delay = (event.start_time + offset) - self._timers.now()
            self._arm_highlight(event.position, highlight_delay, event.duration_s, token)

        total = events[-1].end_time - audio_now
        self._completion = self._timers.call_later(
            total + config.COMPLETION_MARGIN_SEC, lambda: self._finish_sequence(on_complete), token
        )
        logger.debug("Scheduled %d notes at %d bpm (%.2fs)", len(events), clamp_tempo(bpm), total)
        return events

    def play_target(self, note: ExerciseNote, position: int, duration_s: float) -> float:
        """Play one note now for *duration_s* and return the duration used."""
        audio_now = self._output.now()
        voice = self._voices.create(note.note)
        self._registry.add(voice)
        schedule_fixed(voice, audio_now, duration_s)
        self._arm_highlight(position, 0.0, duration_s, self._token)
        return duration_s

    def stop(self) -> None:
        """Cancel pending highlights and the completion timer, and silence every voice."""
        self._token.cancel()
        self._token = CancelToken()
        if self._completion is not None:
            self._completion.cancel()
            self._completion = None
        self._registry.stop_all()
        self.events = []
        self._staff.clear()

    def _arm_highlight(self, position: int, delay: float, duration: float, token: CancelToken) -> None:
        delay = max(0.0, delay)

        def highlight() -> None:
            if token.cancelled:
                return
            self._staff.highlight(position)

        def clear() -> None:
            if token.cancelled:
                return
            # The next note may already own the highlight.
            if self._staff.highlighted == position:
                self._staff.clear()

        self._timers.call_later(delay, highlight, token)
        self._timers.call_later(delay + duration, clear, token)

    def _finish_sequence(self, on_complete: Callable[[], None] | None) -> None:
        self._completion = None
        self._registry.prune()
        if on_complete is not None:
            on_complete()
