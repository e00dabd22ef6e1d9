"""Pointer, computer-keyboard and MIDI input folded into note attempts."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence

from ear_trainer.audio.context import AudioOutput
from ear_trainer.audio.voice import VoiceFactory, play_click, play_held, release_held
from ear_trainer.game.ear_test import EarTest
from ear_trainer.game.session import AttemptOutcome
from ear_trainer.input.keymap import note_for_key, on_keyboard
from ear_trainer.midi.messages import MidiKind, parse_message
from ear_trainer.music.notes import normalize_note_name
from ear_trainer.playback.registry import ActiveVoiceRegistry
from ear_trainer.settings import AudioSettings
from ear_trainer.utils.math_utils import clamp

logger = logging.getLogger(__name__)


class KeyIndicator(Protocol):
    def press(self, note: str, hold: bool) -> None:
        ...

    def release(self, note: str) -> None:
        ...


def velocity_to_gain(velocity: float, cap: float, curve: float) -> float:
    """``min(cap, (velocity / 127) ** curve * cap)`` with every input clamped."""
    normalized = clamp(velocity, 0, 127) / 127.0
    cap = clamp(cap, 0.0, 1.0)
    curve = clamp(curve, 1.0, 3.0)
    return min(cap, (normalized ** curve) * cap)


class InputAdapter:
    """Turns every input channel into one attempt against the running test.

    Pointer and key presses sound at full gain and stop on their own. MIDI
    note-ons are velocity shaped and held, one voice per note, until the
    matching note-off. While a running test has input locked nothing sounds
    and nothing is scored.
    """

    def __init__(
        self,
        voices: VoiceFactory,
        registry: ActiveVoiceRegistry,
        output: AudioOutput,
        test: EarTest,
        settings: Callable[[], AudioSettings],
        indicator: KeyIndicator | None = None,
    ) -> None:
        self._voices = voices
        self._registry = registry
        self._output = output
        self._test = test
        self._settings = settings
        self._indicator = indicator

    def click(self, note: str) -> AttemptOutcome:
        self._press(note, hold=False)
        if not self._test.accepts_input:
            return AttemptOutcome.IGNORED
        voice = self._voices.create(note)
        self._registry.add(voice)
        play_click(voice, self._output.now())
        return self._test.attempt(note)

    def key_down(self, key: str, repeat: bool = False) -> AttemptOutcome | None:
        if repeat:
            return None
        note = note_for_key(key)
        if note is None:
            return None
        return self.click(note)

    def midi_message(self, data: Sequence[int]) -> AttemptOutcome | None:
        event = parse_message(data)
        if event is None:
            return None
        if not on_keyboard(event.note):
            logger.debug("MIDI note %d is outside the keyboard range", event.note)
            return None
        if event.kind is MidiKind.NOTE_ON:
            return self.note_on(event.name, event.velocity)
        self.note_off(event.name)
        return None

    def note_on(self, note: str, velocity: int) -> AttemptOutcome:
        self._press(note, hold=True)
        if not self._test.accepts_input:
            return AttemptOutcome.IGNORED

        name = normalize_note_name(note)
        previous = self._registry.release(name)
        if previous is not None:
            previous.stop()

        settings = self._settings().clamped()
        gain = velocity_to_gain(velocity, settings.midi_gain_cap, settings.midi_curve)
        voice = self._voices.create(name)
        self._registry.hold(name, voice)
        play_held(voice, self._output.now(), gain, settings.midi_attack_s)
        return self._test.attempt(name)

    def note_off(self, note: str) -> bool:
        """Release a held MIDI note; False when the note was not held."""
        if self._indicator is not None:
            self._indicator.release(note)
        voice = self._registry.release(note)
        if voice is None:
            return False
        settings = self._settings().clamped()
        release_held(voice, self._output.now(), settings.midi_release_s)
        # Still reachable by a global stop while the release tail plays.
        self._registry.add(voice)
        return True

    def _press(self, note: str, hold: bool) -> None:
        if self._indicator is not None:
            self._indicator.press(note, hold)
