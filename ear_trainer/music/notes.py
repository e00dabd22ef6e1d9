"""Note names: parsing, canonical spelling, MIDI numbers and frequencies."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ear_trainer import config

_NOTE_RE = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")

LETTER_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
SHARP_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


@dataclass(frozen=True, slots=True)
class NoteSymbol:
    letter: str
    accidental: str
    octave: int

    @property
    def midi(self) -> int:
        semitone = LETTER_SEMITONES[self.letter]
        if self.accidental == "#":
            semitone += 1
        elif self.accidental == "b":
            semitone -= 1
        # C0 is MIDI 12, which keeps octave numbering and MIDI numbers aligned.
        return 12 + semitone + self.octave * 12

    @property
    def name(self) -> str:
        return f"{self.letter}{self.accidental}{self.octave}"

    def normalized(self) -> "NoteSymbol":
        """Return the sharp-preferred spelling; flats move to the sharp below."""
        if self.accidental != "b":
            return self
        midi = self.midi
        spelled = SHARP_NAMES[midi % 12]
        return NoteSymbol(spelled[0], spelled[1:], midi // 12 - 1)


def parse_note(name: str) -> NoteSymbol:
    """Parse names like ``C4``, ``d#5`` or ``Bb3``; raise ValueError otherwise."""
    if not isinstance(name, str):
        raise ValueError(f"not a note name: {name!r}")
    match = _NOTE_RE.match(name.strip())
    if match is None:
        raise ValueError(f"not a note name: {name!r}")
    letter, accidental, octave = match.groups()
    return NoteSymbol(letter.upper(), accidental, int(octave))


def normalize_note_name(name: str) -> str:
    """Canonical string form used for equality and sample lookup.

    ``Db4`` and ``C#4`` both become ``C#4``. Strings that are not note names
    come back upper-cased so comparisons stay well defined.
    """
    if not name or not isinstance(name, str):
        return ""
    try:
        return parse_note(name).normalized().name
    except ValueError:
        return name.upper()


def notes_match(attempted: str, target: str) -> bool:
    return normalize_note_name(attempted) == normalize_note_name(target)


def midi_to_hz(note: int) -> float:
    return 440.0 * (2.0 ** ((note - 69) / 12.0))


def note_to_midi(name: str) -> int:
    return parse_note(name).midi


def note_to_freq(name: str) -> float:
    """Fundamental frequency of *name*; unreadable names fall back to A4."""
    try:
        return midi_to_hz(note_to_midi(name))
    except ValueError:
        return 440.0


def midi_to_note_name(note: int) -> str:
    """``60`` -> ``C4``."""
    return f"{SHARP_NAMES[note % 12]}{note // 12 - 1}"


def duration_beats(duration: str) -> float:
    return config.DURATION_BEATS.get(duration, 1.0)


def duration_seconds(duration: str, bpm: float) -> float:
    return duration_beats(duration) * 60.0 / bpm
