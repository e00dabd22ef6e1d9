"""Treble staff layout and drawing, with one highlighted note."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import pygame

from ear_trainer import config
from ear_trainer.music.exercises import ExerciseNote
from ear_trainer.music.notes import parse_note

_LETTERS = "CDEFGAB"
_BOTTOM_LINE_STEP = _LETTERS.index("E") + 7 * 4  # E4
_TOP_LINE = 8  # F5, in steps above the bottom line


@dataclass(frozen=True, slots=True)
class NoteGlyph:
    x: float
    y: float
    step: int
    accidental: str
    ledgers: tuple[float, ...]


def staff_step(note: str) -> int:
    """Diatonic steps above the bottom staff line (E4 = 0, C4 = -2, G5 = 9)."""
    symbol = parse_note(note)
    return _LETTERS.index(symbol.letter) + 7 * symbol.octave - _BOTTOM_LINE_STEP


def layout_notes(
    notes: Sequence[ExerciseNote],
    left: float,
    right: float,
    bottom_line_y: float,
    line_spacing: float = config.STAFF_LINE_SPACING,
) -> list[NoteGlyph | None]:
    """Pixel positions per note; unreadable notes get None and are not drawn."""
    x_start = left + 30
    gap = min(60.0, (right - x_start) / max(1, len(notes)))
    half = line_spacing / 2

    glyphs: list[NoteGlyph | None] = []
    for i, item in enumerate(notes):
        try:
            step = staff_step(item.note)
            accidental = parse_note(item.note).accidental
        except ValueError:
            glyphs.append(None)
            continue
        ledgers: list[float] = []
        for s in range(-2, step - 1, -2):
            ledgers.append(bottom_line_y - s * half)
        for s in range(_TOP_LINE + 2, step + 1, 2):
            ledgers.append(bottom_line_y - s * half)
        glyphs.append(NoteGlyph(x_start + i * gap, bottom_line_y - step * half, step, accidental, tuple(ledgers)))
    return glyphs


class StaffRenderer:
    """Keeps the current note list and highlight; draws them every frame."""

    def __init__(self, rect: pygame.Rect) -> None:
        self.rect = rect
        self.notes: tuple[ExerciseNote, ...] = ()
        self.glyphs: list[NoteGlyph | None] = []
        self.highlighted: int | None = None

    @property
    def bottom_line_y(self) -> float:
        return self.rect.y + self.rect.h / 2 + 2 * config.STAFF_LINE_SPACING

    def set_notes(self, notes: Sequence[ExerciseNote]) -> None:
        self.notes = tuple(notes)
        self.highlighted = None
        self._relayout()

    def resize(self, rect: pygame.Rect) -> None:
        self.rect = rect
        self._relayout()

    def _relayout(self) -> None:
        self.glyphs = layout_notes(self.notes, self.rect.x + 20, self.rect.right - 20, self.bottom_line_y)

    def highlight(self, position: int) -> None:
        if 0 <= position < len(self.notes):
            self.highlighted = position

    def clear(self) -> None:
        self.highlighted = None

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(screen, config.PAPER_COLOR, self.rect, border_radius=10)
        left, right = self.rect.x + 20, self.rect.right - 20
        for i in range(5):
            y = self.bottom_line_y - i * config.STAFF_LINE_SPACING
            pygame.draw.line(screen, config.INK_COLOR, (left, y), (right, y), 1)

        for index, glyph in enumerate(self.glyphs):
            if glyph is None:
                continue
            for y in glyph.ledgers:
                pygame.draw.line(screen, config.INK_COLOR, (glyph.x - 12, y), (glyph.x + 12, y), 1)
            color = config.HIGHLIGHT_COLOR if index == self.highlighted else config.INK_COLOR
            head = pygame.Rect(0, 0, 14, 10)
            head.center = (int(glyph.x), int(glyph.y))
            pygame.draw.ellipse(screen, color, head)
            if glyph.accidental:
                sign = "#" if glyph.accidental == "#" else "b"
                screen.blit(font.render(sign, True, color), (glyph.x - 22, glyph.y - 10))
