"""The audio clock and output graph.

One :class:`AudioContext` owns the audio clock, the master gain and every
sound scheduled on it. The application pumps :meth:`AudioContext.render`
once per frame; start, stop and gain changes are only requests against the
audio clock until then, except for immediate stops, which take effect
synchronously.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from ear_trainer import config
from ear_trainer.audio.backends import AudioBackend
from ear_trainer.audio.errors import AudioError, VoiceStateError
from ear_trainer.audio.params import GainParam
from ear_trainer.clock import Clock
from ear_trainer.utils.math_utils import clamp

logger = logging.getLogger(__name__)


class SoundState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    PLAYING = "playing"
    FINISHED = "finished"


class MasterGain:
    """The node every voice routes through."""

    def __init__(self, context: "AudioContext", volume: float) -> None:
        self.context = context
        self.gain = GainParam(clamp(volume, 0.0, 1.0))

    def level(self, when: float) -> float:
        return self.gain.value_at(when)


class ScheduledSound:
    """A backend sound placed on the context timeline, with its own gain."""

    def __init__(self, context: "AudioContext", sound: object, *, loops: int = 0, length: float | None = None) -> None:
        self.context = context
        self.output = context.master
        self.gain = GainParam(1.0)
        self.start_time: float | None = None
        self.stop_time: float | None = None
        self.state = SoundState.IDLE
        self._sound = sound
        self._loops = loops
        self._length = length
        self._playing: object | None = None

    @property
    def is_live(self) -> bool:
        return self.state in (SoundState.SCHEDULED, SoundState.PLAYING)

    def start(self, when: float) -> None:
        if self.state is not SoundState.IDLE:
            raise VoiceStateError("sound already started")
        self.start_time = max(float(when), self.context.now())
        if self._loops == 0 and self._length:
            self.stop_time = self.start_time + self._length
        self.state = SoundState.SCHEDULED
        self.context.attach(self)

    def stop(self, when: float | None = None) -> None:
        """Request a stop; without *when* (or with a past time) it is immediate."""
        if self.state is SoundState.FINISHED:
            return
        now = self.context.now()
        when = now if when is None else float(when)
        if self.state is SoundState.IDLE or when <= now:
            self._halt()
            return
        self.stop_time = when if self.stop_time is None else min(self.stop_time, when)

    def disconnect(self) -> None:
        self._halt()

    def _halt(self) -> None:
        self.state = SoundState.FINISHED
        self.context.detach(self)
        playing, self._playing = self._playing, None
        if playing is not None:
            self.context.backend.stop(playing)

    def render(self, now: float, master_level: float) -> None:
        if self.state is SoundState.SCHEDULED:
            if self.start_time is None or now < self.start_time:
                return
            if self.stop_time is not None and now >= self.stop_time:
                self._halt()
                return
            volume = clamp(self.gain.value_at(now) * master_level, 0.0, 1.0)
            self._playing = self.context.backend.play(self._sound, loops=self._loops, volume=volume)
            self.state = SoundState.PLAYING
            return

        if self.state is SoundState.PLAYING:
            if self.stop_time is not None and now >= self.stop_time:
                self._halt()
                return
            volume = clamp(self.gain.value_at(now) * master_level, 0.0, 1.0)
            self.context.backend.set_volume(self._playing, volume)


class AudioContext:
    def __init__(self, backend: AudioBackend, clock: Clock, volume: float) -> None:
        self.backend = backend
        self._clock = clock
        self._origin = clock.now()
        self._sounds: list[ScheduledSound] = []
        self.closed = False
        self.master = MasterGain(self, volume)

    def now(self) -> float:
        """Audio-clock seconds since the context was created."""
        return self._clock.now() - self._origin

    def attach(self, sound: ScheduledSound) -> None:
        self._sounds.append(sound)

    def detach(self, sound: ScheduledSound) -> None:
        try:
            self._sounds.remove(sound)
        except ValueError:
            pass

    @property
    def live_sounds(self) -> int:
        return len(self._sounds)

    def render(self) -> None:
        if self.closed:
            return
        now = self.now()
        master_level = self.master.level(now)
        for sound in list(self._sounds):
            try:
                sound.render(now, master_level)
            except AudioError as exc:
                logger.warning("Dropping sound that failed to render: %s", exc)
                sound.state = SoundState.FINISHED
                self.detach(sound)

    def close(self) -> None:
        for sound in list(self._sounds):
            try:
                sound.stop()
            except AudioError:
                pass
        self._sounds.clear()
        self.closed = True


class AudioOutput:
    """Lazily owns the single AudioContext and its master gain.

    The context is created on first use. If it gets closed, the next access
    builds a fresh one (and with it a fresh master gain).
    """

    def __init__(self, backend_factory: Callable[[], AudioBackend], clock: Clock, volume: float = 1.0) -> None:
        self._backend_factory = backend_factory
        self._backend: AudioBackend | None = None
        self._clock = clock
        self._volume = clamp(volume, 0.0, 1.0)
        self._context: AudioContext | None = None

    @property
    def backend(self) -> AudioBackend:
        if self._backend is None:
            self._backend = self._backend_factory()
        return self._backend

    def context(self) -> AudioContext:
        if self._context is None or self._context.closed:
            self._context = AudioContext(self.backend, self._clock, self._volume)
            logger.debug("Created audio context (volume %.2f)", self._volume)
        return self._context

    def now(self) -> float:
        return self.context().now()

    def master_output(self) -> MasterGain:
        return self.context().master

    def set_volume(self, volume: float) -> None:
        """Move the master level with a short target ramp, never a jump."""
        self._volume = clamp(volume, 0.0, 1.0)
        context = self.context()
        now = context.now()
        context.master.gain.restart_from(now)
        context.master.gain.set_target_at_time(self._volume, now, config.VOLUME_TIME_CONSTANT)

    def render(self) -> None:
        if self._context is not None:
            self._context.render()

    def close(self) -> None:
        if self._context is not None:
            self._context.close()
        if self._backend is not None:
            self._backend.close()
            self._backend = None
