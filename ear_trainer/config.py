"""Centralized configuration for the ear trainer."""

from __future__ import annotations

import os

# File handling
EXERCISES_PATH = os.path.join(os.path.dirname(__file__), "data", "exercises.json")  # Bundled exercise list
MIDI_DIR = "exercises"  # Optional folder with .mid/.midi exercises
SAMPLES_DIR = "samples"  # <SAMPLES_DIR>/<instrument>/<note>.wav
SETTINGS_PATH = "audio_settings.json"
LOG_DIR = "logs"

# Visual dimensions
WINDOW_WIDTH, WINDOW_HEIGHT = 1100, 650
FULLSCREEN = False
SAFE_MARGIN = 18
FPS = 120
TOPBAR_HEIGHT = 40
CONTROLS_HEIGHT = 36
STAFF_TOP = 150
STAFF_LINE_SPACING = 12
KEYBOARD_HEIGHT = 150
BLACK_KEY_HEIGHT_RATIO = 0.65
BLACK_KEY_WIDTH_RATIO = 0.65

# Audio engine
SAMPLE_RATE = 44100
MIXER_CHANNELS = 64
SYNTH_LOOP_SEC = 1.0  # Length of the looped synth buffer
SYNTH_AMPLITUDE = 0.9
VOLUME_TIME_CONSTANT = 0.01

# Scheduling
LEAD_IN_SEC = 0.1  # First note starts this far in the future
ATTACK_SEC = 0.02
RELEASE_SEC = 0.05
STOP_TAIL_SEC = 0.02  # Voice is stopped this long after the nominal end
SYNTH_PEAK_GAIN = 0.12  # Keeps overlapping synth notes from clipping
SAMPLE_PEAK_GAIN = 1.0
COMPLETION_MARGIN_SEC = 0.05
SETTLE_SEC = 0.12  # Input stays locked this long after the target ends

# Tempo / test flow
TEMPO_MIN, TEMPO_MAX = 40, 220
DEFAULT_TEMPO = 90
DEFAULT_PAUSE_SEC = 1.0
DURATION_BEATS = {"whole": 4.0, "half": 2.0, "quarter": 1.0, "eighth": 0.5}

# Live input
CLICK_SAMPLE_STOP_SEC = 0.75
CLICK_SYNTH_STOP_SEC = 0.5
CLICK_VELOCITY = 100
MIN_ATTACK_SEC = 0.001
MIN_RELEASE_SEC = 0.005
KEY_PRESS_FLASH_SEC = 0.2
CORRECT_FLASH_SEC = 0.4
WRONG_FLASH_SEC = 0.5

# MIDI
KEYBOARD_LOW, KEYBOARD_HIGH = 48, 84  # C3..C6, the on-screen keyboard
MIDI_RESCAN_SEC = 2.0
MIDI_INPUT_NAME_CONTAINS = ""  # All devices if empty

# Instruments: name -> synth waveform used when no sample is loaded
INSTRUMENTS = {
    "piano": "sine",
    "sine": "sine",
    "square": "square",
    "sawtooth": "sawtooth",
    "triangle": "triangle",
}
SAMPLED_INSTRUMENTS = ("piano",)
DEFAULT_INSTRUMENT = "piano"

# Colors
BACKGROUND_COLOR_TOP = (9, 12, 18)
BACKGROUND_COLOR_BOTTOM = (18, 20, 28)
TOPBAR_BG = (22, 26, 33)
TOPBAR_BG_ACCENT = (36, 48, 66)
TOPBAR_BORDER = (70, 88, 118)
TOPBAR_GLOW = (60, 140, 255)
PAPER_COLOR = (236, 232, 220)
INK_COLOR = (20, 20, 24)
HIGHLIGHT_COLOR = (210, 34, 68)
WHITE_KEY_COLOR = (244, 244, 240)
BLACK_KEY_COLOR = (24, 26, 32)
KEY_ACTIVE_COLOR = (120, 170, 255)
KEY_CORRECT_COLOR = (70, 200, 110)
KEY_WRONG_COLOR = (225, 70, 70)
KEY_BORDER_COLOR = (10, 10, 14)

# UI
FONT_SIZE = 22
HUD_COLOR = (225, 233, 246)
MUTED_TEXT = (165, 175, 189)
