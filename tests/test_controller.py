from __future__ import annotations

import pytest

from ear_trainer.game.controller import TrainerController
from ear_trainer.game.session import TestPhase
from ear_trainer.playback.timers import TimerQueue
from ear_trainer.settings import SettingsStore
from tests.fakes import FakeBackend, FakeClock, RecordingKeyboard, RecordingStaff, make_exercise, make_output


def _controller(clock: FakeClock, exercises=None, settings: SettingsStore | None = None, backend=None):
    return TrainerController(
        output=make_output(clock, backend),
        timers=TimerQueue(clock),
        staff=RecordingStaff(),
        exercises=exercises if exercises is not None else [make_exercise("C4", "D4", "E4")],
        settings=settings or SettingsStore(None),
        keyboard=RecordingKeyboard(),
        instrument="sine",
    )


def test_current_exercise_is_shown_on_the_staff() -> None:
    controller = _controller(FakeClock())
    assert len(controller.staff.notes) == 3


def test_play_without_exercises_reports_it() -> None:
    controller = _controller(FakeClock(), exercises=[])
    assert controller.exercise is None
    assert not controller.play()
    assert controller.status == "No exercise loaded."
    assert not controller.start_test()
    assert controller.display_status == "No exercise loaded."


def test_playback_runs_to_completion() -> None:
    clock = FakeClock()
    controller = _controller(clock)
    controller.set_tempo(120)

    assert controller.play()
    assert controller.status == "Playing Test at 120 BPM"
    for _ in range(20):
        clock.advance(0.1)
        controller.update()
    assert controller.status == "Playback finished."
    assert not controller.scheduler.is_playing


def test_stop_is_safe_to_repeat() -> None:
    controller = _controller(FakeClock())
    controller.play()
    controller.stop()
    controller.stop()
    assert controller.status == "Stopped."
    assert len(controller.registry) == 0


def test_starting_a_test_stops_playback() -> None:
    clock = FakeClock()
    controller = _controller(clock)
    controller.play()
    assert controller.start_test()
    assert not controller.scheduler.is_playing
    assert len(controller.registry) == 0
    assert controller.display_status.startswith("Test started")


def test_stop_test_reports_and_returns_to_idle() -> None:
    controller = _controller(FakeClock())
    controller.start_test()
    controller.stop_test()
    assert controller.test.phase is TestPhase.IDLE
    assert controller.display_status == "Test stopped."


def test_selecting_an_exercise_cancels_and_applies_its_tempo() -> None:
    clock = FakeClock()
    exercises = [make_exercise("C4"), make_exercise("E4", "G4", title="Imported", bpm=100)]
    controller = _controller(clock, exercises=exercises)
    controller.start_test()

    controller.next_exercise()
    assert controller.exercise.title == "Imported"
    assert controller.state.tempo == 100
    assert not controller.test.active
    assert len(controller.staff.notes) == 2

    controller.next_exercise()
    assert controller.state.selected_idx == 1
    controller.previous_exercise()
    controller.previous_exercise()
    assert controller.state.selected_idx == 0


def test_tempo_and_pause_are_clamped() -> None:
    controller = _controller(FakeClock())
    assert controller.set_tempo(5) == 40
    assert controller.set_tempo("fast") == 90
    assert controller.set_pause(-3) == 0.0


def test_volume_is_clamped_persisted_and_ramped(tmp_path) -> None:
    clock = FakeClock()
    store = SettingsStore(tmp_path / "settings.json")
    controller = _controller(clock, settings=store)

    assert controller.set_volume(1.7) == pytest.approx(1.0)
    assert SettingsStore(tmp_path / "settings.json").settings.volume == pytest.approx(1.0)

    controller.set_volume(0.25)
    clock.advance(0.2)
    master = controller.output.master_output()
    assert master.level(controller.output.now()) == pytest.approx(0.25, abs=1e-3)

    settings = controller.reset_audio_settings()
    assert settings.volume == pytest.approx(0.8)


def test_audio_settings_update() -> None:
    controller = _controller(FakeClock())
    settings = controller.update_audio_settings(midi_gain_cap=0.9, midi_curve=9)
    assert settings.midi_gain_cap == pytest.approx(0.9)
    assert settings.midi_curve == pytest.approx(3.0)


def test_instruments_cycle_and_reject_unknown_names() -> None:
    controller = _controller(FakeClock())
    assert controller.instrument == "sine"
    assert controller.cycle_instrument() == "square"
    assert controller.set_instrument("kazoo") == "square"
    assert controller.set_instrument("piano") == "piano"


def test_shutdown_closes_the_backend() -> None:
    backend = FakeBackend()
    controller = _controller(FakeClock(), backend=backend)
    controller.play()
    controller.shutdown()
    assert backend.closed
