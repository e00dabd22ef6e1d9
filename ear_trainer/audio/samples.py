"""Per-instrument table of decoded note samples."""

from __future__ import annotations

import logging
import os
import threading
from typing import Dict, Iterable

from ear_trainer.audio.backends import AudioBackend
from ear_trainer.audio.errors import AudioError
from ear_trainer.music.notes import normalize_note_name

logger = logging.getLogger(__name__)


def sample_path(root: str, instrument: str, note: str) -> str:
    return os.path.join(root, instrument, f"{normalize_note_name(note)}.wav")


class SampleTable:
    """Maps (instrument, normalized note) to a loaded sound.

    Loading happens on a daemon thread, so lookups may run while the table is
    still filling; anything not yet loaded reads as absent.
    """

    def __init__(self, backend: AudioBackend, root: str) -> None:
        self._backend = backend
        self.root = root
        self._sounds: Dict[str, Dict[str, object]] = {}
        self._lengths: Dict[int, float] = {}
        self._lock = threading.Lock()
        self._threads: Dict[str, threading.Thread] = {}

    def get(self, instrument: str, note: str) -> object | None:
        with self._lock:
            return self._sounds.get(instrument, {}).get(normalize_note_name(note))

    def length(self, sound: object) -> float:
        with self._lock:
            cached = self._lengths.get(id(sound))
        if cached is not None:
            return cached
        return self._backend.sound_length(sound)

    def loaded_count(self, instrument: str) -> int:
        with self._lock:
            return len(self._sounds.get(instrument, {}))

    def load_instrument(self, instrument: str, notes: Iterable[str], background: bool = True) -> threading.Thread | None:
        """Load every note of *instrument*; returns the worker thread when backgrounded."""
        names = sorted({normalize_note_name(n) for n in notes})
        if not background:
            self._load(instrument, names)
            return None
        thread = threading.Thread(target=self._load, args=(instrument, names), daemon=True)
        self._threads[instrument] = thread
        thread.start()
        return thread

    def _load(self, instrument: str, names: list[str]) -> None:
        with self._lock:
            self._sounds.setdefault(instrument, {})
        missing = 0
        for name in names:
            path = sample_path(self.root, instrument, name)
            try:
                sound = self._backend.load_sound(path)
                length = self._backend.sound_length(sound)
            except AudioError as exc:
                if missing == 0:
                    # Don't log every note when the whole folder is missing.
                    logger.warning(
                        "Could not load %s samples, the synth will be used as a fallback: %s", instrument, exc
                    )
                missing += 1
                continue
            with self._lock:
                self._sounds[instrument][name] = sound
                self._lengths[id(sound)] = length
        logger.info("%s samples loaded: %d of %d", instrument, len(names) - missing, len(names))
