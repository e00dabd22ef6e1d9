"""Test session state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TestPhase(str, Enum):
    __test__ = False

    IDLE = "idle"
    ARMED = "armed"  # target chosen, not yet waiting
    WAITING = "waiting"  # silent pause before the target plays
    SOUNDING = "sounding"  # target audible, input locked
    LISTENING = "listening"  # input open, awaiting an attempt
    FINISHED = "finished"


class AttemptOutcome(str, Enum):
    FREE_PLAY = "free_play"  # no test running
    IGNORED = "ignored"  # input locked
    CORRECT = "correct"
    WRONG = "wrong"
    FINISHED = "finished"  # correct, and it was the last note


@dataclass
class TestSession:
    __test__ = False

    active: bool = False
    phase: TestPhase = TestPhase.IDLE
    index: int = 0
    target: str | None = None
    score: int = 0
    attempts: int = 0
    input_locked: bool = False
    total: int = 0

    def reset(self) -> None:
        self.active = False
        self.phase = TestPhase.IDLE
        self.index = 0
        self.target = None
        self.score = 0
        self.attempts = 0
        self.input_locked = False
        self.total = 0

    @property
    def score_text(self) -> str:
        return f"Score: {self.score}/{self.attempts}"
