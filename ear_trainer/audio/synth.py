"""Periodic waveform synthesis for the synth fallback voice."""

from __future__ import annotations

import math
import struct

from ear_trainer import config

WAVEFORMS = ("sine", "square", "sawtooth", "triangle")


def _sample(waveform: str, phase: float) -> float:
    """One sample of *waveform* at *phase* in cycles, in [-1, 1]."""
    frac = phase - math.floor(phase)
    if waveform == "square":
        return 1.0 if frac < 0.5 else -1.0
    if waveform == "sawtooth":
        return 2.0 * frac - 1.0
    if waveform == "triangle":
        return 4.0 * frac - 1.0 if frac < 0.5 else 3.0 - 4.0 * frac
    return math.sin(2.0 * math.pi * frac)


def loop_length(freq: float, sec: float = config.SYNTH_LOOP_SEC) -> tuple[int, int]:
    """Whole cycles and sample count for a buffer that loops without a seam."""
    cycles = max(1, int(round(freq * sec)))
    n_samples = max(1, int(round(cycles * config.SAMPLE_RATE / freq)))
    return cycles, n_samples


def make_loop_pcm(
    freq: float,
    waveform: str = "sine",
    vol: float = config.SYNTH_AMPLITUDE,
    sec: float = config.SYNTH_LOOP_SEC,
) -> bytes:
    """Signed 16-bit mono PCM holding a whole number of cycles of *waveform*."""
    if waveform not in WAVEFORMS:
        waveform = "sine"
    cycles, n_samples = loop_length(freq, sec)

    data = bytearray()
    for i in range(n_samples):
        sample = _sample(waveform, cycles * i / n_samples)
        value = int(32767 * vol * sample)
        data += struct.pack("<h", max(-32768, min(32767, value)))
    return bytes(data)
