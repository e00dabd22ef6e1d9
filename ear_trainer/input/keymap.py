"""Computer-keyboard note map and the on-screen keyboard's note range."""

from __future__ import annotations

from ear_trainer import config
from ear_trainer.music.notes import midi_to_note_name

KEYBOARD_NOTES = [midi_to_note_name(n) for n in range(config.KEYBOARD_LOW, config.KEYBOARD_HIGH + 1)]

# Bottom row plays the C3 octave naturals, the middle rows a chromatic C4..B5,
# and space the top C6.
KEY_TO_NOTE = {
    "z": "C3",
    "x": "D3",
    "c": "E3",
    "v": "F3",
    "b": "G3",
    "n": "A3",
    "m": "B3",
    "a": "C4",
    "w": "C#4",
    "s": "D4",
    "e": "D#4",
    "d": "E4",
    "f": "F4",
    "t": "F#4",
    "g": "G4",
    "y": "G#4",
    "h": "A4",
    "u": "A#4",
    "j": "B4",
    "k": "C5",
    "o": "C#5",
    "l": "D5",
    "p": "D#5",
    ";": "E5",
    "'": "F5",
    "[": "F#5",
    "]": "G5",
    "\\": "G#5",
    ",": "A5",
    ".": "A#5",
    "/": "B5",
    " ": "C6",
}


def note_for_key(key: str) -> str | None:
    return KEY_TO_NOTE.get(key.lower()) if key else None


def is_black(note: str) -> bool:
    return "#" in note


def on_keyboard(midi_note: int) -> bool:
    return config.KEYBOARD_LOW <= midi_note <= config.KEYBOARD_HIGH
