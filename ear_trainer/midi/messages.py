"""Raw MIDI channel messages -> note events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ear_trainer.music.notes import midi_to_note_name

logger = logging.getLogger(__name__)


class MidiKind(str, Enum):
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


@dataclass(frozen=True, slots=True)
class MidiNoteEvent:
    kind: MidiKind
    note: int
    velocity: int
    channel: int

    @property
    def name(self) -> str:
        return midi_to_note_name(self.note)


def parse_message(data: Sequence[int]) -> MidiNoteEvent | None:
    """Decode a status/data triple; anything but note-on/note-off returns None.

    Note-off is ``0x80-0x8F``, or ``0x90-0x9F`` with velocity 0.
    """
    if len(data) < 3:
        return None
    status, note, velocity = int(data[0]), int(data[1]) & 0x7F, int(data[2]) & 0x7F
    command = status & 0xF0
    channel = status & 0x0F
    if command == 0x90 and velocity > 0:
        return MidiNoteEvent(MidiKind.NOTE_ON, note, velocity, channel)
    if command == 0x80 or command == 0x90:
        return MidiNoteEvent(MidiKind.NOTE_OFF, note, velocity, channel)
    logger.debug("Ignoring MIDI status 0x%02X", status)
    return None
