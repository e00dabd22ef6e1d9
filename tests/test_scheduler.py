from __future__ import annotations

import pytest

from ear_trainer import config
from ear_trainer.audio.voice import VoiceFactory
from ear_trainer.music.exercises import ExerciseNote
from ear_trainer.playback.registry import ActiveVoiceRegistry
from ear_trainer.playback.scheduler import NoteScheduler, clamp_tempo, compute_schedule
from ear_trainer.playback.timers import TimerQueue
from tests.fakes import FakeBackend, FakeClock, RecordingStaff, make_output


def _scheduler(clock: FakeClock, backend: FakeBackend | None = None):
    output = make_output(clock, backend)
    registry = ActiveVoiceRegistry()
    timers = TimerQueue(clock)
    staff = RecordingStaff()
    scheduler = NoteScheduler(output, VoiceFactory(output, None, "sine"), registry, timers, staff)
    return scheduler, output, registry, timers, staff


NOTES = [ExerciseNote("C4"), ExerciseNote("D4"), ExerciseNote("E4")]


def test_compute_schedule_places_notes_back_to_back() -> None:
    events = compute_schedule(NOTES, 120, 10.0)
    assert [e.duration_s for e in events] == pytest.approx([0.5, 0.5, 0.5])
    assert [e.start_time for e in events] == pytest.approx([10.0, 10.5, 11.0])
    assert [e.position for e in events] == [0, 1, 2]
    assert events[-1].end_time == pytest.approx(11.5)


@pytest.mark.parametrize("raw, expected", [(10, 40), (500, 220), ("fast", 90), (None, 90), (133.4, 133)])
def test_clamp_tempo(raw: object, expected: int) -> None:
    assert clamp_tempo(raw) == expected


def test_play_sequence_schedules_ahead_on_the_audio_clock() -> None:
    clock = FakeClock()
    backend = FakeBackend()
    scheduler, output, registry, timers, staff = _scheduler(clock, backend)

    events = scheduler.play_sequence(NOTES, 120)

    assert events[0].start_time == pytest.approx(config.LEAD_IN_SEC)
    assert [e.start_time for e in events] == pytest.approx([0.1, 0.6, 1.1])
    assert len(registry) == 3
    assert scheduler.is_playing

    output.render()
    assert backend.played == []
    clock.advance(0.11)
    output.render()
    assert len(backend.played) == 1


def test_highlight_follows_the_notes() -> None:
    clock = FakeClock()
    scheduler, output, registry, timers, staff = _scheduler(clock)
    scheduler.play_sequence(NOTES, 120)

    clock.advance(0.11)
    timers.run_due()
    assert staff.highlighted == 0

    clock.advance(0.5)
    timers.run_due()
    assert staff.highlighted == 1

    clock.advance(0.5)
    timers.run_due()
    assert staff.highlighted == 2

    clock.advance(0.5)
    timers.run_due()
    assert staff.highlighted is None


def test_completion_callback_runs_once_after_the_last_note() -> None:
    clock = FakeClock()
    scheduler, output, registry, timers, staff = _scheduler(clock)
    done: list[bool] = []
    scheduler.play_sequence(NOTES, 120, on_complete=lambda: done.append(True))

    clock.advance(1.5)
    timers.run_due()
    assert done == []

    clock.advance(0.2)
    timers.run_due()
    timers.run_due()
    assert done == [True]
    assert not scheduler.is_playing


def test_stop_silences_everything_and_voids_pending_highlights() -> None:
    clock = FakeClock()
    backend = FakeBackend()
    scheduler, output, registry, timers, staff = _scheduler(clock, backend)
    done: list[bool] = []
    scheduler.play_sequence(NOTES, 120, on_complete=lambda: done.append(True))

    clock.advance(0.2)
    timers.run_due()
    output.render()
    assert staff.highlighted == 0

    scheduler.stop()
    assert len(registry) == 0
    assert staff.highlighted is None
    assert backend.sounding == []
    assert not scheduler.is_playing

    calls_after_stop = list(staff.calls)
    clock.advance(5.0)
    timers.run_due()
    output.render()
    assert staff.calls == calls_after_stop
    assert done == []
    assert backend.sounding == []

    scheduler.stop()


def test_replaying_cancels_the_previous_batch() -> None:
    clock = FakeClock()
    scheduler, output, registry, timers, staff = _scheduler(clock)
    scheduler.play_sequence(NOTES, 120)
    scheduler.play_sequence(NOTES[:1], 120)

    assert len(registry) == 1
    assert len(scheduler.events) == 1


def test_empty_sequence_does_nothing() -> None:
    clock = FakeClock()
    scheduler, output, registry, timers, staff = _scheduler(clock)
    assert scheduler.play_sequence([], 120) == []
    assert not scheduler.is_playing
    assert timers.pending() == 0


def test_play_target_sounds_now_and_highlights() -> None:
    clock = FakeClock()
    backend = FakeBackend()
    scheduler, output, registry, timers, staff = _scheduler(clock, backend)

    played = scheduler.play_target(ExerciseNote("E4"), 1, 0.5)
    assert played == pytest.approx(0.5)
    timers.run_due()
    output.render()
    assert staff.highlighted == 1
    assert len(backend.played) == 1

    clock.advance(0.6)
    timers.run_due()
    assert staff.highlighted is None
