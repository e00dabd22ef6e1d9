"""User audio preferences and their JSON store."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from ear_trainer.utils.math_utils import clamp, to_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioSettings:
    volume: float = 0.8
    midi_gain_cap: float = 0.5
    midi_curve: float = 1.5
    midi_attack_s: float = 0.005
    midi_release_s: float = 0.05

    def clamped(self) -> "AudioSettings":
        """Each value forced into its documented range; junk becomes the default."""
        defaults = AudioSettings()
        return AudioSettings(
            volume=clamp(to_float(self.volume, defaults.volume), 0.0, 1.0),
            midi_gain_cap=clamp(to_float(self.midi_gain_cap, defaults.midi_gain_cap), 0.0, 1.0),
            midi_curve=clamp(to_float(self.midi_curve, defaults.midi_curve), 1.0, 3.0),
            midi_attack_s=clamp(to_float(self.midi_attack_s, defaults.midi_attack_s), 0.0, 0.05),
            midi_release_s=clamp(to_float(self.midi_release_s, defaults.midi_release_s), 0.0, 0.2),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "AudioSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known}).clamped()


class SettingsStore:
    """Persists :class:`AudioSettings` as JSON; unreadable files yield defaults."""

    def __init__(self, path: str | Path | None) -> None:
        self.path = Path(path) if path is not None else None
        self.settings = self.load()

    def load(self) -> AudioSettings:
        if self.path is None or not self.path.exists():
            return AudioSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable settings %s: %s", self.path, exc)
            return AudioSettings()
        if not isinstance(data, dict):
            return AudioSettings()
        return AudioSettings.from_dict(data)

    def save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.write_text(json.dumps(asdict(self.settings), indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save settings to %s: %s", self.path, exc)

    def update(self, **changes: object) -> AudioSettings:
        data = asdict(self.settings)
        data.update(changes)
        self.settings = AudioSettings.from_dict(data)
        self.save()
        return self.settings

    def reset(self) -> AudioSettings:
        self.settings = AudioSettings()
        self.save()
        return self.settings
