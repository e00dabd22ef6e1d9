"""Sound output backends: pygame.mixer, and a silent stand-in."""

from __future__ import annotations

import logging
from typing import NamedTuple, Protocol

import pygame

from ear_trainer import config
from ear_trainer.audio.errors import AudioError

logger = logging.getLogger(__name__)


class AudioBackend(Protocol):
    def create_sound(self, pcm: bytes) -> object:
        """Wrap signed 16-bit mono PCM at ``config.SAMPLE_RATE``."""

    def load_sound(self, path: str) -> object:
        ...

    def sound_length(self, sound: object) -> float:
        ...

    def play(self, sound: object, *, loops: int, volume: float) -> object:
        ...

    def set_volume(self, playing: object, volume: float) -> None:
        ...

    def stop(self, playing: object) -> None:
        ...

    def close(self) -> None:
        ...


class _Playing(NamedTuple):
    channel: pygame.mixer.Channel
    sound: pygame.mixer.Sound


def to_channels(pcm: bytes, channels: int) -> bytes:
    """Interleave mono 16-bit PCM into *channels* identical channels."""
    if channels <= 1:
        return bytes(pcm)
    return b"".join(pcm[i:i + 2] * channels for i in range(0, len(pcm) - 1, 2))


class MixerBackend:
    """pygame.mixer output; each playing voice owns one mixer channel."""

    def __init__(self) -> None:
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.pre_init(config.SAMPLE_RATE, size=-16, channels=1, buffer=512)
                pygame.mixer.init()
            pygame.mixer.set_num_channels(config.MIXER_CHANNELS)
        except pygame.error as exc:
            raise AudioError(f"mixer init failed: {exc}") from exc

    def create_sound(self, pcm: bytes) -> pygame.mixer.Sound:
        """Wrap mono 16-bit PCM, copying each sample across the mixer's channels."""
        try:
            init = pygame.mixer.get_init()
            channels = init[2] if init else 1
            return pygame.mixer.Sound(buffer=to_channels(pcm, channels))
        except pygame.error as exc:
            raise AudioError(str(exc)) from exc

    def load_sound(self, path: str) -> pygame.mixer.Sound:
        try:
            return pygame.mixer.Sound(path)
        except (pygame.error, FileNotFoundError) as exc:
            raise AudioError(f"{path}: {exc}") from exc

    def sound_length(self, sound: pygame.mixer.Sound) -> float:
        return float(sound.get_length())

    def play(self, sound: pygame.mixer.Sound, *, loops: int, volume: float) -> _Playing:
        try:
            channel = pygame.mixer.find_channel(True)
            channel.set_volume(volume)
            channel.play(sound, loops=loops)
        except (pygame.error, AttributeError) as exc:
            raise AudioError(str(exc)) from exc
        return _Playing(channel, sound)

    def set_volume(self, playing: _Playing, volume: float) -> None:
        # A stolen channel belongs to a newer voice now.
        if playing.channel.get_sound() is playing.sound:
            playing.channel.set_volume(volume)

    def stop(self, playing: _Playing) -> None:
        try:
            if playing.channel.get_sound() is playing.sound:
                playing.channel.stop()
        except pygame.error as exc:
            raise AudioError(str(exc)) from exc

    def close(self) -> None:
        pygame.mixer.quit()


class SilentBackend:
    """Keeps the playback machinery running when no audio device is available."""

    def create_sound(self, pcm: bytes) -> bytes:
        return pcm

    def load_sound(self, path: str) -> object:
        raise AudioError(f"{path}: no audio device")

    def sound_length(self, sound: object) -> float:
        if isinstance(sound, (bytes, bytearray)):
            return len(sound) / 2 / config.SAMPLE_RATE
        return 0.0

    def play(self, sound: object, *, loops: int, volume: float) -> object:
        return sound

    def set_volume(self, playing: object, volume: float) -> None:
        pass

    def stop(self, playing: object) -> None:
        pass

    def close(self) -> None:
        pass


def open_backend() -> AudioBackend:
    try:
        return MixerBackend()
    except AudioError as exc:
        logger.warning("Audio output unavailable, continuing silently: %s", exc)
        return SilentBackend()
