"""Rendering for the top bar (exercise chips, volume, instrument) and the control row."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import pygame

from ear_trainer import config
from ear_trainer.music.exercises import Exercise


ChipInfo = Tuple[pygame.Rect, int]

CONTROL_BUTTONS = (
    ("play", "Play"),
    ("stop", "Stop"),
    ("start_test", "Start Test"),
    ("stop_test", "Stop Test"),
    ("tempo_down", "-"),
    ("tempo_up", "+"),
    ("pause_down", "-"),
    ("pause_up", "+"),
)


def _gradient(screen: pygame.Surface, rect: pygame.Rect, top: tuple, bottom: tuple) -> None:
    surface = pygame.Surface(rect.size)
    for y in range(rect.h):
        lerp = y / max(1, rect.h - 1)
        color = tuple(int(top[i] + (bottom[i] - top[i]) * lerp) for i in range(3))
        pygame.draw.line(surface, color, (0, y), (rect.w, y))
    screen.blit(surface, rect)


def _button(screen: pygame.Surface, font: pygame.font.Font, rect: pygame.Rect, label: str, active: bool = False) -> None:
    bg_color = (76, 88, 110) if active else (48, 54, 64)
    border_color = (120, 140, 170) if active else (72, 82, 98)
    pygame.draw.rect(screen, bg_color, rect, border_radius=8)
    pygame.draw.rect(screen, border_color, rect, 1, border_radius=8)
    text = font.render(label, True, (240, 240, 245))
    screen.blit(text, text.get_rect(center=rect.center))


def draw_topbar(
    screen: pygame.Surface,
    font: pygame.font.Font,
    exercises: Sequence[Exercise],
    selected_idx: int,
    scroll_x: int,
    volume: float,
    instrument: str,
) -> tuple[list[ChipInfo], pygame.Rect, pygame.Rect]:
    """Draw the top bar; returns ``(chips, volume_slider, instrument_button)``."""

    screen_width = config.WINDOW_WIDTH
    top_rect = pygame.Rect(0, 0, screen_width, config.TOPBAR_HEIGHT)
    _gradient(screen, top_rect, config.TOPBAR_BG, config.TOPBAR_BG_ACCENT)
    pygame.draw.line(screen, config.TOPBAR_BORDER, (0, config.TOPBAR_HEIGHT - 1), (screen_width, config.TOPBAR_HEIGHT - 1), 1)
    pygame.draw.line(screen, config.TOPBAR_GLOW, (0, config.TOPBAR_HEIGHT - 2), (screen_width, config.TOPBAR_HEIGHT - 2), 1)

    height = config.TOPBAR_HEIGHT - 12
    instrument_btn = pygame.Rect(screen_width - 150 - 12, 6, 150, height)
    _button(screen, font, instrument_btn, instrument.capitalize(), active=True)

    # Volume slider
    slider_width = 140
    slider_height = 12
    slider_x = instrument_btn.x - slider_width - 20
    slider_y = 6 + (height - slider_height) // 2
    slider_rect = pygame.Rect(slider_x, slider_y, slider_width, slider_height)
    pygame.draw.rect(screen, (32, 42, 55), slider_rect, border_radius=6)
    fill_width = int(slider_width * max(0.0, min(1.0, volume)))
    if fill_width:
        pygame.draw.rect(screen, (80, 160, 255), pygame.Rect(slider_x, slider_y, fill_width, slider_height), border_radius=6)
    knob_rect = pygame.Rect(slider_x + max(0, fill_width - 6), slider_y - 3, 12, slider_height + 6)
    pygame.draw.rect(screen, (210, 230, 255), knob_rect, border_radius=6)
    label = font.render(f"Vol {int(volume * 100)}%", True, (220, 230, 240))
    screen.blit(label, (slider_x - label.get_width() - 8, slider_y - 3))

    x_pos = 12 - scroll_x
    chips: list[ChipInfo] = []
    max_x = slider_x - label.get_width() - 20

    for index, exercise in enumerate(exercises):
        text = font.render(exercise.title, True, (240, 240, 245))
        padding_x = 14
        width = text.get_width() + padding_x * 2
        rect = pygame.Rect(x_pos, 6, width, height)

        if rect.right < 0:
            x_pos += width + 8
            continue
        if rect.left > max_x:
            break

        bg_color = (76, 88, 110) if index == selected_idx else (48, 54, 64)
        border_color = (120, 140, 170) if index == selected_idx else (72, 82, 98)
        pygame.draw.rect(screen, bg_color, rect, border_radius=10)
        pygame.draw.rect(screen, border_color, rect, 1, border_radius=10)
        screen.blit(text, (rect.x + padding_x, rect.y + 6))

        chips.append((rect, index))
        x_pos += width + 8

    return chips, slider_rect, instrument_btn


def draw_controls(
    screen: pygame.Surface,
    font: pygame.font.Font,
    tempo: int,
    pause_s: float,
    playing: bool,
    testing: bool,
) -> Dict[str, pygame.Rect]:
    """Draw the transport/test/tempo row under the top bar and return button rects by name."""
    y = config.TOPBAR_HEIGHT + 6
    height = config.CONTROLS_HEIGHT - 6
    x = 12
    buttons: Dict[str, pygame.Rect] = {}
    labels: List[tuple[int, str]] = []

    for name, label in CONTROL_BUTTONS:
        if name == "tempo_down":
            labels.append((x, f"Tempo {tempo} BPM"))
            x += 130
        elif name == "pause_down":
            labels.append((x, f"Pause {pause_s:.1f}s"))
            x += 100
        width = 34 if label in ("-", "+") else font.size(label)[0] + 28
        rect = pygame.Rect(x, y, width, height)
        active = (name == "play" and playing) or (name == "start_test" and testing)
        _button(screen, font, rect, label, active=active)
        buttons[name] = rect
        x = rect.right + 8

    for label_x, text in labels:
        screen.blit(font.render(text, True, config.HUD_COLOR), (label_x, y + 6))
    return buttons
