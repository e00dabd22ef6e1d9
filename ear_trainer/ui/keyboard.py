"""On-screen piano keyboard: layout, hit testing and key flashes."""

from __future__ import annotations

from typing import Dict, List, Tuple

import pygame

from ear_trainer import config
from ear_trainer.clock import Clock
from ear_trainer.input.keymap import KEYBOARD_NOTES, is_black
from ear_trainer.music.notes import normalize_note_name

KeyRect = Tuple[pygame.Rect, str]


def key_rects(area: pygame.Rect, notes: List[str] = KEYBOARD_NOTES) -> tuple[list[KeyRect], list[KeyRect]]:
    """Return ``(white, black)`` key rectangles laid out across *area*.

    Black keys straddle the boundary between the two white keys around them.
    """
    whites = [n for n in notes if not is_black(n)]
    key_width = area.w / max(1, len(whites))
    black_width = key_width * config.BLACK_KEY_WIDTH_RATIO
    black_height = int(area.h * config.BLACK_KEY_HEIGHT_RATIO)

    white_rects: list[KeyRect] = []
    black_rects: list[KeyRect] = []
    white_index = 0
    for note in notes:
        if is_black(note):
            x = area.x + white_index * key_width - black_width / 2
            black_rects.append((pygame.Rect(int(x), area.y, int(black_width), black_height), note))
        else:
            x = area.x + white_index * key_width
            white_rects.append((pygame.Rect(int(x), area.y, int(key_width) - 1, area.h), note))
            white_index += 1
    return white_rects, black_rects


class KeyboardView:
    """Keys from C3 to C6 with press, hold and correct/wrong flashes."""

    def __init__(self, area: pygame.Rect, clock: Clock) -> None:
        self.area = area
        self.clock = clock
        self.white, self.black = key_rects(area)
        # note -> expiry time, or None while held by MIDI
        self.pressed: Dict[str, float | None] = {}
        self.flashes: Dict[str, tuple[bool, float]] = {}

    def resize(self, area: pygame.Rect) -> None:
        self.area = area
        self.white, self.black = key_rects(area)

    def hit_test(self, pos: tuple[int, int]) -> str | None:
        for rect, note in self.black:
            if rect.collidepoint(pos):
                return note
        for rect, note in self.white:
            if rect.collidepoint(pos):
                return note
        return None

    def press(self, note: str, hold: bool) -> None:
        name = normalize_note_name(note)
        self.pressed[name] = None if hold else self.clock.now() + config.KEY_PRESS_FLASH_SEC

    def release(self, note: str) -> None:
        self.pressed.pop(normalize_note_name(note), None)

    def flash(self, note: str, correct: bool) -> None:
        seconds = config.CORRECT_FLASH_SEC if correct else config.WRONG_FLASH_SEC
        self.flashes[normalize_note_name(note)] = (correct, self.clock.now() + seconds)

    def color_for(self, note: str) -> tuple[int, int, int]:
        now = self.clock.now()
        flash = self.flashes.get(note)
        if flash is not None:
            correct, until = flash
            if now < until:
                return config.KEY_CORRECT_COLOR if correct else config.KEY_WRONG_COLOR
            del self.flashes[note]
        if note in self.pressed:
            until = self.pressed[note]
            if until is None or now < until:
                return config.KEY_ACTIVE_COLOR
            del self.pressed[note]
        return config.BLACK_KEY_COLOR if is_black(note) else config.WHITE_KEY_COLOR

    def draw(self, screen: pygame.Surface) -> None:
        for rect, note in self.white:
            pygame.draw.rect(screen, self.color_for(note), rect, border_radius=4)
            pygame.draw.rect(screen, config.KEY_BORDER_COLOR, rect, 1, border_radius=4)
        for rect, note in self.black:
            pygame.draw.rect(screen, self.color_for(note), rect, border_radius=3)
