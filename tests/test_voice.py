from __future__ import annotations

import os

import pytest

from ear_trainer import config
from ear_trainer.audio.samples import SampleTable, sample_path
from ear_trainer.audio.synth import loop_length, make_loop_pcm
from ear_trainer.audio.voice import (
    SampleVoice,
    SynthVoice,
    VoiceFactory,
    VoiceKind,
    play_click,
    play_held,
    release_held,
    schedule_fixed,
)
from tests.fakes import FakeBackend, FakeClock, make_output


def _piano_table(backend: FakeBackend, *notes: str) -> SampleTable:
    table = SampleTable(backend, "samples")
    table.load_instrument("piano", notes, background=False)
    return table


def test_sample_path_uses_the_normalized_name() -> None:
    assert sample_path("samples", "piano", "Db4") == os.path.join("samples", "piano", "C#4.wav")


def test_sample_table_skips_missing_files() -> None:
    backend = FakeBackend({sample_path("samples", "piano", "C4"): 2.0})
    table = _piano_table(backend, "C4", "D4")

    assert table.loaded_count("piano") == 1
    sound = table.get("piano", "C4")
    assert sound is not None
    assert table.length(sound) == pytest.approx(2.0)
    assert table.get("piano", "D4") is None
    assert table.get("organ", "C4") is None


def test_factory_prefers_a_loaded_sample() -> None:
    clock = FakeClock()
    backend = FakeBackend({sample_path("samples", "piano", "C4"): 2.0})
    factory = VoiceFactory(make_output(clock, backend), _piano_table(backend, "C4"), "piano")

    voice = factory.create("C4")
    assert isinstance(voice, SampleVoice)
    assert voice.kind is VoiceKind.SAMPLE


def test_factory_falls_back_to_the_synth() -> None:
    clock = FakeClock()
    backend = FakeBackend()
    factory = VoiceFactory(make_output(clock, backend), _piano_table(backend, "C4"), "piano")

    voice = factory.create("C4")
    assert isinstance(voice, SynthVoice)
    assert voice.waveform == "sine"


def test_synth_instruments_ignore_samples_and_cache_tones() -> None:
    clock = FakeClock()
    backend = FakeBackend({sample_path("samples", "piano", "C4"): 2.0})
    factory = VoiceFactory(make_output(clock, backend), _piano_table(backend, "C4"), "square")

    first = factory.create("C4")
    second = factory.create("C4")
    assert isinstance(first, SynthVoice)
    assert first.waveform == "square"
    assert len(backend.created) == 1
    assert second.note == "C4"


def test_fixed_profile_for_synth_voice() -> None:
    clock = FakeClock()
    output = make_output(clock)
    voice = VoiceFactory(output, None, "sine").create("A4")

    schedule_fixed(voice, 1.0, 0.5)

    assert voice.gain.value_at(1.0) == pytest.approx(0.0)
    assert voice.gain.value_at(1.25) == pytest.approx(config.SYNTH_PEAK_GAIN)
    assert voice.gain.value_at(1.5) == pytest.approx(0.0)
    assert voice._sound.stop_time == pytest.approx(1.5 + config.STOP_TAIL_SEC)


def test_fixed_profile_for_sample_voice_peaks_at_full_gain() -> None:
    clock = FakeClock()
    backend = FakeBackend({sample_path("samples", "piano", "A4"): 3.0})
    voice = VoiceFactory(make_output(clock, backend), _piano_table(backend, "A4"), "piano").create("A4")

    schedule_fixed(voice, 0.0, 1.0)
    assert voice.gain.value_at(0.5) == pytest.approx(config.SAMPLE_PEAK_GAIN)


def test_click_stops_on_its_own() -> None:
    clock = FakeClock()
    voice = VoiceFactory(make_output(clock), None, "sine").create("C4")

    play_click(voice, 0.0)
    assert voice.gain.value_at(0.0) == pytest.approx(1.0)
    assert voice._sound.stop_time == pytest.approx(config.CLICK_SYNTH_STOP_SEC)


def test_held_voice_ramps_up_and_releases() -> None:
    clock = FakeClock()
    voice = VoiceFactory(make_output(clock), None, "sine").create("C4")

    play_held(voice, 0.0, 0.4, 0.01)
    assert voice.gain.value_at(0.005) == pytest.approx(0.2)
    assert voice.gain.value_at(0.5) == pytest.approx(0.4)
    assert voice._sound.stop_time is None

    release_held(voice, 1.0, 0.1)
    assert voice.gain.value_at(1.05) == pytest.approx(0.2)
    assert voice._sound.stop_time == pytest.approx(1.1)


def test_loop_buffer_holds_whole_cycles() -> None:
    cycles, n_samples = loop_length(440.0, 1.0)
    assert cycles == 440
    assert n_samples == 44100
    pcm = make_loop_pcm(440.0, "triangle", sec=0.01)
    assert len(pcm) == 2 * loop_length(440.0, 0.01)[1]
