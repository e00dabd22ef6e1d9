"""Every voice that may still be sounding, for global stop and MIDI note-off."""

from __future__ import annotations

import logging
from typing import Dict

from ear_trainer.audio.errors import AudioError
from ear_trainer.audio.voice import Voice
from ear_trainer.music.notes import normalize_note_name

logger = logging.getLogger(__name__)


class ActiveVoiceRegistry:
    def __init__(self) -> None:
        self._voices: Dict[int, Voice] = {}
        self._held: Dict[str, Voice] = {}
        self._next_handle = 1

    def __len__(self) -> int:
        return len(self._voices) + len(self._held)

    @property
    def held_count(self) -> int:
        return len(self._held)

    def add(self, voice: Voice) -> int:
        self.prune()
        handle = self._next_handle
        self._next_handle += 1
        self._voices[handle] = voice
        return handle

    def discard(self, handle: int) -> None:
        self._voices.pop(handle, None)

    def hold(self, note: str, voice: Voice) -> None:
        """Track *voice* as the held voice for *note*, tearing down any previous one."""
        previous = self._held.pop(normalize_note_name(note), None)
        if previous is not None:
            _force_stop(previous)
        self._held[normalize_note_name(note)] = voice

    def held(self, note: str) -> Voice | None:
        return self._held.get(normalize_note_name(note))

    def release(self, note: str) -> Voice | None:
        return self._held.pop(normalize_note_name(note), None)

    def prune(self) -> None:
        for handle in [h for h, v in self._voices.items() if not v.is_live]:
            del self._voices[handle]

    def stop_all(self) -> int:
        """Silence everything now. Safe to call repeatedly or with nothing active."""
        voices = list(self._voices.values()) + list(self._held.values())
        self._voices.clear()
        self._held.clear()
        for voice in voices:
            _force_stop(voice)
        return len(voices)


def _force_stop(voice: Voice) -> None:
    try:
        voice.stop()
    except AudioError as exc:
        logger.debug("Ignoring failed stop for %s: %s", voice.note, exc)
