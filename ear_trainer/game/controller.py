"""Wires the scheduler, the test flow and the input adapter together."""

from __future__ import annotations

import logging
from typing import Protocol

from ear_trainer import config
from ear_trainer.audio.context import AudioOutput
from ear_trainer.audio.samples import SampleTable
from ear_trainer.audio.voice import VoiceFactory
from ear_trainer.game.ear_test import EarTest
from ear_trainer.game.session import TestPhase
from ear_trainer.game.state import TrainerState
from ear_trainer.input.adapter import InputAdapter, KeyIndicator
from ear_trainer.music.exercises import Exercise
from ear_trainer.playback.registry import ActiveVoiceRegistry
from ear_trainer.playback.scheduler import NoteScheduler, StaffView
from ear_trainer.playback.timers import TimerQueue
from ear_trainer.settings import AudioSettings, SettingsStore

logger = logging.getLogger(__name__)


class KeyboardIndicator(KeyIndicator, Protocol):
    def flash(self, note: str, correct: bool) -> None:
        ...


class TrainerController:
    """Owns one trainer session: registry, scheduler, test and input.

    The pygame shell forwards user actions here and calls :meth:`update`
    once per frame; nothing in this class touches pygame.
    """

    def __init__(
        self,
        *,
        output: AudioOutput,
        timers: TimerQueue,
        staff: StaffView,
        exercises: list[Exercise],
        settings: SettingsStore,
        samples: SampleTable | None = None,
        keyboard: KeyboardIndicator | None = None,
        instrument: str = config.DEFAULT_INSTRUMENT,
        tempo: object = config.DEFAULT_TEMPO,
        pause_s: object = config.DEFAULT_PAUSE_SEC,
    ) -> None:
        self.output = output
        self.timers = timers
        self.staff = staff
        self.keyboard = keyboard
        self.settings = settings
        self.state = TrainerState(exercises, tempo, pause_s)

        self.registry = ActiveVoiceRegistry()
        self.voices = VoiceFactory(output, samples, instrument if instrument in config.INSTRUMENTS else config.DEFAULT_INSTRUMENT)
        self.scheduler = NoteScheduler(output, self.voices, self.registry, timers, staff)
        self.test = EarTest(self.scheduler, timers, feedback=self._flash)
        self.input = InputAdapter(
            self.voices, self.registry, output, self.test, lambda: self.settings.settings, indicator=keyboard
        )

        self.status = ""
        self.midi_status = ""
        self._show_current()

    @property
    def exercise(self) -> Exercise | None:
        return self.state.current

    @property
    def instrument(self) -> str:
        return self.voices.instrument

    @property
    def audio_settings(self) -> AudioSettings:
        return self.settings.settings

    @property
    def test_status(self) -> str:
        return self.test.status

    @property
    def display_status(self) -> str:
        """The running (or just finished) test's status, else the last playback status."""
        if self.test.active or self.test.phase is TestPhase.FINISHED:
            return self.test.status
        return self.status

    # ---------- Exercises ----------
    def select_exercise(self, index: int) -> Exercise | None:
        self._cancel_all()
        exercise = self.state.select(index)
        self._show_current()
        return exercise

    def next_exercise(self) -> Exercise | None:
        return self.select_exercise(self.state.selected_idx + 1)

    def previous_exercise(self) -> Exercise | None:
        return self.select_exercise(self.state.selected_idx - 1)

    def _show_current(self) -> None:
        exercise = self.state.current
        self.staff.set_notes(exercise.notes if exercise else ())
        if exercise is None:
            self.status = "No exercise loaded."

    def _cancel_all(self) -> None:
        if self.test.active:
            self.test.stop()
        self.scheduler.stop()

    # ---------- Playback ----------
    def play(self) -> bool:
        exercise = self.state.current
        if exercise is None or not exercise.notes:
            self.status = "No exercise loaded."
            return False
        self.scheduler.play_sequence(exercise.notes, self.state.tempo, on_complete=self._playback_done)
        self.status = f"Playing {exercise.title} at {self.state.tempo} BPM"
        return True

    def stop(self) -> None:
        self.scheduler.stop()
        self.status = "Stopped."

    def _playback_done(self) -> None:
        self.status = "Playback finished."

    # ---------- Test ----------
    def start_test(self) -> bool:
        self.scheduler.stop()
        started = self.test.start(self.state.current, self.state.tempo, self.state.pause_s)
        if not started:
            self.status = self.test.status
        return started

    def stop_test(self) -> None:
        if self.test.active or self.test.phase is TestPhase.FINISHED:
            self.test.stop()
            self.status = self.test.status

    # ---------- Settings ----------
    def set_tempo(self, bpm: object) -> int:
        tempo = self.state.set_tempo(bpm)
        self.test.update_settings(tempo, self.state.pause_s)
        return tempo

    def set_pause(self, pause_s: object) -> float:
        pause = self.state.set_pause(pause_s)
        self.test.update_settings(self.state.tempo, pause)
        return pause

    def set_volume(self, volume: object) -> float:
        settings = self.settings.update(volume=volume)
        self.output.set_volume(settings.volume)
        return settings.volume

    def update_audio_settings(self, **changes: object) -> AudioSettings:
        settings = self.settings.update(**changes)
        self.output.set_volume(settings.volume)
        return settings

    def reset_audio_settings(self) -> AudioSettings:
        settings = self.settings.reset()
        self.output.set_volume(settings.volume)
        return settings

    def set_instrument(self, instrument: str) -> str:
        if instrument in config.INSTRUMENTS:
            self.voices.instrument = instrument
            logger.info("Instrument: %s", instrument)
        else:
            logger.warning("Unknown instrument %r", instrument)
        return self.voices.instrument

    def cycle_instrument(self) -> str:
        names = list(config.INSTRUMENTS)
        index = names.index(self.voices.instrument) if self.voices.instrument in names else -1
        return self.set_instrument(names[(index + 1) % len(names)])

    def set_midi_status(self, status: str) -> None:
        self.midi_status = status

    # ---------- Frame ----------
    def update(self) -> None:
        self.timers.run_due()
        self.output.render()

    def shutdown(self) -> None:
        self._cancel_all()
        self.output.close()

    def _flash(self, note: str, correct: bool) -> None:
        if self.keyboard is not None:
            self.keyboard.flash(note, correct)
