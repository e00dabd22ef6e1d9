"""The listen-then-answer test flow."""

from __future__ import annotations

import logging
from typing import Callable

from ear_trainer import config
from ear_trainer.game.session import AttemptOutcome, TestPhase, TestSession
from ear_trainer.music.exercises import Exercise
from ear_trainer.music.notes import duration_seconds, normalize_note_name
from ear_trainer.playback.scheduler import NoteScheduler, clamp_tempo
from ear_trainer.playback.timers import CancelToken, TimerQueue
from ear_trainer.utils.math_utils import to_float

logger = logging.getLogger(__name__)

# (note name, correct?) -> transient visual feedback
FeedbackFn = Callable[[str, bool], None]


def clamp_pause(pause_s: object) -> float:
    return max(0.0, to_float(pause_s, config.DEFAULT_PAUSE_SEC))


class EarTest:
    """Sequential quiz over one exercise.

    Each target goes ARMED -> WAITING (silent pause) -> SOUNDING (played,
    input locked) -> LISTENING (input open). A correct answer arms the next
    target; a wrong one leaves the target in place. Pending steps are timers
    tied to one cancellation token, so :meth:`stop` voids all of them at once.
    """

    def __init__(
        self,
        scheduler: NoteScheduler,
        timers: TimerQueue,
        feedback: FeedbackFn | None = None,
        settle_s: float = config.SETTLE_SEC,
    ) -> None:
        self._scheduler = scheduler
        self._timers = timers
        self._feedback = feedback
        self._settle_s = settle_s
        self._token = CancelToken()
        self._exercise: Exercise | None = None
        self._bpm = config.DEFAULT_TEMPO
        self._pause_s = config.DEFAULT_PAUSE_SEC
        self.session = TestSession()
        self.status = ""

    @property
    def phase(self) -> TestPhase:
        return self.session.phase

    @property
    def active(self) -> bool:
        return self.session.active

    @property
    def accepts_input(self) -> bool:
        """False while a running test has input locked."""
        return not (self.session.active and self.session.input_locked)

    def start(self, exercise: Exercise | None, bpm: object, pause_s: object) -> bool:
        if exercise is None or not exercise.notes:
            self.status = "No exercise loaded."
            return False

        self._token.cancel()
        self._token = CancelToken()
        self._exercise = exercise
        self._bpm = clamp_tempo(bpm)
        self._pause_s = clamp_pause(pause_s)

        self.session.reset()
        self.session.active = True
        self.session.total = len(exercise.notes)
        self.status = "Test started — listen and click the correct key."
        logger.info("Test started: %s (%d notes, %d bpm)", exercise.title, len(exercise.notes), self._bpm)
        self._arm(0)
        return True

    def update_settings(self, bpm: object, pause_s: object) -> None:
        """Tempo and pause changes apply from the next target onwards."""
        self._bpm = clamp_tempo(bpm)
        self._pause_s = clamp_pause(pause_s)

    def attempt(self, note: str) -> AttemptOutcome:
        session = self.session
        if not session.active:
            return AttemptOutcome.FREE_PLAY
        if session.input_locked or session.phase is not TestPhase.LISTENING:
            return AttemptOutcome.IGNORED

        exercise = self._exercise
        if exercise is None or session.target is None:
            return AttemptOutcome.IGNORED

        session.attempts += 1
        if normalize_note_name(note) != normalize_note_name(session.target):
            self.status = "Wrong — try again."
            self._flash(note, False)
            return AttemptOutcome.WRONG

        session.score += 1
        session.input_locked = True
        self.status = "Correct!"
        self._flash(note, True)

        next_index = session.index + 1
        if next_index >= len(exercise.notes):
            self._finish()
            return AttemptOutcome.FINISHED
        self._arm(next_index)
        return AttemptOutcome.CORRECT

    def stop(self, status: str = "Test stopped.") -> None:
        was_active = self.session.active
        self._token.cancel()
        self._token = CancelToken()
        self._scheduler.stop()
        self.session.active = False
        self.session.phase = TestPhase.IDLE
        self.session.target = None
        self.session.index = 0
        self.session.input_locked = False
        self.status = status
        if was_active:
            logger.info("Test stopped (%s)", self.session.score_text)

    def _arm(self, index: int) -> None:
        if self._exercise is None:
            return
        session = self.session
        session.index = index
        session.target = self._exercise.notes[index].note
        session.input_locked = True
        session.phase = TestPhase.ARMED
        self._wait()

    def _wait(self) -> None:
        self.session.phase = TestPhase.WAITING
        self._timers.call_later(self._pause_s, self._sound_target, self._token)

    def _sound_target(self) -> None:
        if self._exercise is None:
            return
        session = self.session
        note = self._exercise.notes[session.index]
        session.phase = TestPhase.SOUNDING
        duration = duration_seconds(note.duration, self._bpm)
        played = self._scheduler.play_target(note, session.index, duration)
        self._timers.call_later(played + self._settle_s, self._listen, self._token)

    def _listen(self) -> None:
        self.session.phase = TestPhase.LISTENING
        self.session.input_locked = False

    def _finish(self) -> None:
        session = self.session
        session.active = False
        session.phase = TestPhase.FINISHED
        session.target = None
        session.input_locked = False
        self._token.cancel()
        self._token = CancelToken()
        self.status = "Finished — well done!"
        logger.info("Test finished: %s", session.score_text)

    def _flash(self, note: str, correct: bool) -> None:
        if self._feedback is not None:
            self._feedback(note, correct)
