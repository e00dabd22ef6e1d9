"""MIDI input ports: connection, hot-plug rescans and status text."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List

import mido

from ear_trainer import config
from ear_trainer.clock import Clock

logger = logging.getLogger(__name__)

STATUS_NOT_SUPPORTED = "MIDI: Not Supported"
STATUS_NO_DEVICES = "MIDI: No devices found"


def connected_status(count: int) -> str:
    if count <= 0:
        return STATUS_NO_DEVICES
    return f"MIDI: Connected ({count} device{'s' if count > 1 else ''})"


class MidiInputs:
    """Listens on every available MIDI input; polled from the main loop.

    Device discovery is left to mido. When no MIDI backend is usable the
    status says so and :meth:`poll` yields nothing, so the rest of the app
    works as before.
    """

    def __init__(
        self,
        clock: Clock,
        on_status: Callable[[str], None] | None = None,
        name_contains: str = config.MIDI_INPUT_NAME_CONTAINS,
    ) -> None:
        self._clock = clock
        self._on_status = on_status
        self._name_contains = name_contains.lower()
        self._ports: Dict[str, mido.ports.BaseInput] = {}
        self._next_scan = 0.0
        self.supported = True
        self.status = ""

    def _set_status(self, status: str) -> None:
        if status != self.status:
            self.status = status
            logger.info(status)
            if self._on_status is not None:
                self._on_status(status)

    def _available(self) -> List[str]:
        names = mido.get_input_names()
        if self._name_contains:
            names = [n for n in names if self._name_contains in n.lower()]
        return names

    def scan(self) -> None:
        """Open newly connected inputs and drop vanished ones."""
        if not self.supported:
            return
        try:
            names = self._available()
        except Exception as exc:  # mido raises backend-specific errors (ImportError, rtmidi errors)
            logger.warning("MIDI unavailable: %s", exc)
            self.supported = False
            self._set_status(STATUS_NOT_SUPPORTED)
            return

        for name in list(self._ports):
            if name not in names:
                self._close(name)
        for name in names:
            if name in self._ports:
                continue
            try:
                self._ports[name] = mido.open_input(name)
                logger.info("Listening to MIDI input: %s", name)
            except Exception as exc:  # rtmidi port errors are not OSError
                logger.warning("Could not open MIDI input %s: %s", name, exc)
        self._set_status(connected_status(len(self._ports)))

    def poll(self) -> Iterator[List[int]]:
        """Yield pending messages as raw byte lists; rescans periodically."""
        now = self._clock.now()
        if now >= self._next_scan:
            self._next_scan = now + config.MIDI_RESCAN_SEC
            self.scan()
        for name, port in list(self._ports.items()):
            try:
                for msg in port.iter_pending():
                    yield msg.bytes()
            except OSError as exc:
                logger.warning("MIDI input %s failed: %s", name, exc)
                self._close(name)

    def _close(self, name: str) -> None:
        port = self._ports.pop(name, None)
        if port is None:
            return
        try:
            port.close()
        except OSError:
            pass
        logger.info("MIDI input closed: %s", name)

    def close(self) -> None:
        for name in list(self._ports):
            self._close(name)
