"""Voices: one sounding note, either a loaded sample or a synthesized loop."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Protocol

from ear_trainer import config
from ear_trainer.audio.context import AudioContext, AudioOutput, ScheduledSound
from ear_trainer.audio.params import GainParam
from ear_trainer.audio.samples import SampleTable
from ear_trainer.audio.synth import make_loop_pcm
from ear_trainer.music.notes import normalize_note_name, note_to_freq


class VoiceKind(str, Enum):
    SAMPLE = "sample"
    SYNTH = "synth"


class Voice(Protocol):
    kind: VoiceKind
    note: str
    gain: GainParam

    @property
    def is_live(self) -> bool:
        ...

    def play(self, when: float) -> None:
        ...

    def stop(self, when: float | None = None) -> None:
        ...

    def disconnect(self) -> None:
        ...


class SampleVoice:
    kind = VoiceKind.SAMPLE

    def __init__(self, context: AudioContext, note: str, sound: object, length: float) -> None:
        self.note = note
        self._sound = ScheduledSound(context, sound, loops=0, length=length)
        self.gain = self._sound.gain

    @property
    def is_live(self) -> bool:
        return self._sound.is_live

    def play(self, when: float) -> None:
        self._sound.start(when)

    def stop(self, when: float | None = None) -> None:
        self._sound.stop(when)

    def disconnect(self) -> None:
        self._sound.disconnect()


class SynthVoice:
    kind = VoiceKind.SYNTH

    def __init__(self, context: AudioContext, note: str, sound: object, waveform: str) -> None:
        self.note = note
        self.waveform = waveform
        self._sound = ScheduledSound(context, sound, loops=-1)
        self.gain = self._sound.gain

    @property
    def is_live(self) -> bool:
        return self._sound.is_live

    def play(self, when: float) -> None:
        self._sound.start(when)

    def stop(self, when: float | None = None) -> None:
        self._sound.stop(when)

    def disconnect(self) -> None:
        self._sound.disconnect()


class VoiceFactory:
    """Creates the right voice for a note with a single availability check."""

    def __init__(self, output: AudioOutput, samples: SampleTable | None, instrument: str = config.DEFAULT_INSTRUMENT) -> None:
        self._output = output
        self._samples = samples
        self.instrument = instrument
        self._tone_cache: Dict[tuple[str, str], object] = {}

    @property
    def waveform(self) -> str:
        return config.INSTRUMENTS.get(self.instrument, "sine")

    def create(self, note: str) -> Voice:
        context = self._output.context()
        name = normalize_note_name(note)
        sound = None
        if self._samples is not None and self.instrument in config.SAMPLED_INSTRUMENTS:
            sound = self._samples.get(self.instrument, name)
        if sound is not None:
            return SampleVoice(context, name, sound, self._samples.length(sound))
        return SynthVoice(context, name, self._tone(name), self.waveform)

    def _tone(self, name: str) -> object:
        key = (name, self.waveform)
        tone = self._tone_cache.get(key)
        if tone is None:
            tone = self._output.backend.create_sound(make_loop_pcm(note_to_freq(name), self.waveform))
            self._tone_cache[key] = tone
        return tone


def schedule_fixed(voice: Voice, start: float, duration: float) -> None:
    """Fixed-duration profile used by sequence and target playback."""
    peak = config.SYNTH_PEAK_GAIN if voice.kind is VoiceKind.SYNTH else config.SAMPLE_PEAK_GAIN
    attack_end = start + min(config.ATTACK_SEC, duration)
    release_start = max(attack_end, start + duration - config.RELEASE_SEC)
    end = max(release_start, start + duration)

    voice.gain.set_value_at_time(0.0, start)
    voice.gain.linear_ramp_to_value_at_time(peak, attack_end)
    voice.gain.set_value_at_time(peak, release_start)
    voice.gain.linear_ramp_to_value_at_time(0.0, end)
    voice.play(start)
    voice.stop(end + config.STOP_TAIL_SEC)


def play_click(voice: Voice, now: float) -> None:
    """Full-gain note with a short automatic stop, for pointer and key input."""
    voice.gain.set_value_at_time(1.0, now)
    voice.play(now)
    if voice.kind is VoiceKind.SYNTH:
        voice.gain.linear_ramp_to_value_at_time(0.0, now + config.CLICK_SYNTH_STOP_SEC)
        voice.stop(now + config.CLICK_SYNTH_STOP_SEC)
    else:
        voice.stop(now + config.CLICK_SAMPLE_STOP_SEC)


def play_held(voice: Voice, now: float, gain: float, attack: float) -> None:
    """Velocity-shaped note that sounds until :func:`release_held`."""
    voice.gain.set_value_at_time(0.0, now)
    voice.gain.linear_ramp_to_value_at_time(gain, now + max(config.MIN_ATTACK_SEC, attack))
    voice.play(now)


def release_held(voice: Voice, now: float, release: float) -> None:
    release = max(config.MIN_RELEASE_SEC, release)
    voice.gain.cancel_and_hold(now)
    voice.gain.linear_ramp_to_value_at_time(0.0, now + release)
    voice.stop(now + release)
