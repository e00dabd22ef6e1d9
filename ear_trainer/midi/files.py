"""File discovery helpers."""

from __future__ import annotations

import logging
import os
from typing import List

from ear_trainer.midi.parsing import exercise_from_midi
from ear_trainer.music.exercises import Exercise

logger = logging.getLogger(__name__)


def list_midi_files(folder: str) -> List[str]:
    """Return sorted list of MIDI files in *folder* (".mid" / ".midi")."""
    if not os.path.isdir(folder):
        return []

    midi_files = []
    for filename in sorted(os.listdir(folder)):
        if filename.lower().endswith((".mid", ".midi")):
            midi_files.append(os.path.join(folder, filename))
    return midi_files


def load_midi_exercises(folder: str, first_id: int = 1000) -> List[Exercise]:
    """Import every MIDI file in *folder*; files that fail to parse are skipped."""
    exercises: list[Exercise] = []
    for offset, path in enumerate(list_midi_files(folder)):
        try:
            exercise = exercise_from_midi(path, exercise_id=first_id + offset)
        except (OSError, ValueError, KeyError, EOFError) as exc:
            logger.warning("Could not import %s: %s", path, exc)
            continue
        if exercise.notes:
            exercises.append(exercise)
    return exercises
