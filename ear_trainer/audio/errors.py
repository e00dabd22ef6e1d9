"""Audio exceptions."""


class AudioError(Exception):
    """Raised when the audio backend fails to play, adjust or stop a sound."""


class VoiceStateError(AudioError):
    """Raised when a voice is started twice; voices are never reused."""
