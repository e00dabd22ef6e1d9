"""Exercise model and the JSON exercise source."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from ear_trainer import config
from ear_trainer.music.notes import duration_beats, parse_note

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExerciseNote:
    note: str
    duration: str = "quarter"

    @property
    def beats(self) -> float:
        return duration_beats(self.duration)


@dataclass(frozen=True, slots=True)
class Exercise:
    id: int
    title: str
    text: str
    notes: tuple[ExerciseNote, ...]
    bpm: int | None = None  # suggested tempo, set by MIDI imports

    def __len__(self) -> int:
        return len(self.notes)


def exercise_from_dict(data: dict[str, Any], fallback_id: int = 0) -> Exercise:
    """Build an Exercise from one entry of the JSON source.

    Notes with an unreadable name are dropped; unknown durations are kept and
    count as one beat.
    """
    notes: list[ExerciseNote] = []
    for raw in data.get("notes") or []:
        name = str(raw.get("note", ""))
        try:
            parse_note(name)
        except ValueError:
            logger.warning("Skipping unreadable note %r in exercise %r", name, data.get("title"))
            continue
        duration = str(raw.get("duration", "quarter"))
        if duration not in config.DURATION_BEATS:
            logger.warning("Unknown duration %r for %s, treating as quarter", duration, name)
        notes.append(ExerciseNote(name, duration))

    try:
        exercise_id = int(data.get("id", fallback_id))
    except (TypeError, ValueError):
        exercise_id = fallback_id

    bpm = data.get("bpm")
    return Exercise(
        id=exercise_id,
        title=str(data.get("title") or f"Exercise {exercise_id}"),
        text=str(data.get("exercise") or ""),
        notes=tuple(notes),
        bpm=int(bpm) if isinstance(bpm, (int, float)) else None,
    )


def parse_exercises(payload: dict[str, Any]) -> list[Exercise]:
    entries: Iterable[dict[str, Any]] = payload.get("samples") or []
    return [exercise_from_dict(entry, fallback_id=i + 1) for i, entry in enumerate(entries)]


def load_exercises(path: str | Path) -> list[Exercise]:
    """Load the exercise list from *path*; a missing or broken file yields []."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to load exercises from %s: %s", path, exc)
        return []
    exercises = parse_exercises(payload)
    logger.info("Loaded %d exercises from %s", len(exercises), path)
    return exercises
