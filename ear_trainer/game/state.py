"""Trainer selection state: exercises, tempo and pause."""

from __future__ import annotations

from ear_trainer import config
from ear_trainer.game.ear_test import clamp_pause
from ear_trainer.music.exercises import Exercise
from ear_trainer.playback.scheduler import clamp_tempo
from ear_trainer.utils.math_utils import clamp


class TrainerState:
    """Track the exercise list, the selected exercise and the playback settings."""

    def __init__(
        self,
        exercises: list[Exercise],
        tempo: object = config.DEFAULT_TEMPO,
        pause_s: object = config.DEFAULT_PAUSE_SEC,
    ) -> None:
        self.exercises = exercises
        self.selected_idx = 0
        self.scroll_x = 0
        self.tempo = clamp_tempo(tempo)
        self.pause_s = clamp_pause(pause_s)

    @property
    def current(self) -> Exercise | None:
        if not self.exercises:
            return None
        return self.exercises[self.selected_idx]

    def select(self, index: int) -> Exercise | None:
        if not self.exercises:
            return None
        self.selected_idx = int(clamp(index, 0, len(self.exercises) - 1))
        exercise = self.exercises[self.selected_idx]
        if exercise.bpm is not None:
            self.tempo = clamp_tempo(exercise.bpm)
        return exercise

    def next_exercise(self) -> Exercise | None:
        return self.select(self.selected_idx + 1)

    def previous_exercise(self) -> Exercise | None:
        return self.select(self.selected_idx - 1)

    def set_tempo(self, bpm: object) -> int:
        self.tempo = clamp_tempo(bpm)
        return self.tempo

    def set_pause(self, pause_s: object) -> float:
        self.pause_s = clamp_pause(pause_s)
        return self.pause_s
