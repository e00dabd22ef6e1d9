"""MIDI file import: turn a monophonic melody into an Exercise."""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from typing import List, Tuple

import mido

from ear_trainer import config
from ear_trainer.music.exercises import Exercise, ExerciseNote
from ear_trainer.music.notes import midi_to_note_name

# (note, start_tick, end_tick)
NoteEntry = Tuple[int, int, int]

logger = logging.getLogger(__name__)

_DEFAULT_TEMPO = 500_000  # 120 bpm


def fold_into_range(note: int, low: int = config.KEYBOARD_LOW, high: int = config.KEYBOARD_HIGH) -> int:
    """Shift *note* by octaves until it lies in low..high, keeping its pitch class."""
    while note < low:
        note += 12
    while note > high:
        note -= 12
    return note


def initial_bpm(mid: mido.MidiFile) -> int:
    """Tempo of the earliest set_tempo event across all tracks, as BPM."""
    first: tuple[int, int] | None = None
    for track in mid.tracks:
        abs_tick = 0
        for msg in track:
            abs_tick += msg.time
            if msg.type == "set_tempo":
                if first is None or abs_tick < first[0]:
                    first = (abs_tick, msg.tempo)
                break
    tempo = first[1] if first else _DEFAULT_TEMPO
    return int(round(mido.tempo2bpm(tempo)))


def parse_notes(mid: mido.MidiFile, track_index: int | None = None) -> List[NoteEntry]:
    """Collect note_on/note_off pairs in ticks, optionally for one track only."""
    if track_index is None:
        all_notes: list[NoteEntry] = []
        for idx in range(len(mid.tracks)):
            all_notes.extend(parse_notes(mid, track_index=idx))
        all_notes.sort(key=lambda item: (item[1], -item[0]))
        return all_notes

    if track_index < 0 or track_index >= len(mid.tracks):
        raise ValueError("track_index out of range")

    abs_tick = 0
    note_on_events: defaultdict[tuple[int, int], list[int]] = defaultdict(list)
    notes: list[NoteEntry] = []

    for msg in mid.tracks[track_index]:
        abs_tick += msg.time
        if msg.type == "note_on" and msg.velocity > 0:
            note_on_events[(getattr(msg, "channel", 0), msg.note)].append(abs_tick)
        elif msg.type in ("note_off", "note_on") and (msg.type == "note_off" or getattr(msg, "velocity", 0) == 0):
            key = (getattr(msg, "channel", 0), msg.note)
            if note_on_events[key]:
                start_tick = note_on_events[key].pop(0)
                notes.append((msg.note, start_tick, abs_tick))

    notes.sort(key=lambda item: (item[1], -item[0]))
    return notes


def skyline(notes: List[NoteEntry]) -> List[NoteEntry]:
    """Keep the highest note at each onset so the result is monophonic."""
    melody: list[NoteEntry] = []
    for entry in notes:
        if melody and melody[-1][1] == entry[1]:
            continue  # sorted highest-first within an onset
        melody.append(entry)
    return melody


def quantize_duration(beats: float) -> str:
    """Closest symbolic duration to a length given in beats."""
    return min(config.DURATION_BEATS, key=lambda name: abs(config.DURATION_BEATS[name] - beats))


def exercise_from_midi(path: str, exercise_id: int, track_index: int | None = None) -> Exercise:
    mid = mido.MidiFile(path)
    tpq = mid.ticks_per_beat
    melody = skyline(parse_notes(mid, track_index=track_index))

    exercise_notes: list[ExerciseNote] = []
    folded = 0
    for i, (note, start, end) in enumerate(melody):
        # Each note lasts until the next onset; rests fold into the note before.
        length = (melody[i + 1][1] if i + 1 < len(melody) else end) - start
        playable = fold_into_range(note)
        folded += playable != note
        exercise_notes.append(ExerciseNote(midi_to_note_name(playable), quantize_duration(length / tpq)))
    if folded:
        logger.warning("%s: moved %d notes by octaves into the keyboard range", path, folded)

    title = os.path.splitext(os.path.basename(path))[0]
    return Exercise(
        id=exercise_id,
        title=title,
        text=f"Imported from {os.path.basename(path)}",
        notes=tuple(exercise_notes),
        bpm=initial_bpm(mid),
    )
