"""Main application loop for the ear trainer."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Sequence, Set

import pygame

from ear_trainer import config
from ear_trainer.audio.backends import open_backend
from ear_trainer.audio.context import AudioOutput
from ear_trainer.audio.samples import SampleTable
from ear_trainer.clock import RealClock
from ear_trainer.game.controller import TrainerController
from ear_trainer.input.keymap import KEYBOARD_NOTES
from ear_trainer.midi.files import load_midi_exercises
from ear_trainer.midi.ports import MidiInputs
from ear_trainer.music.exercises import load_exercises
from ear_trainer.playback.timers import TimerQueue
from ear_trainer.settings import SettingsStore
from ear_trainer.ui.keyboard import KeyboardView
from ear_trainer.ui.staff import StaffRenderer
from ear_trainer.ui.topbar import draw_controls, draw_topbar

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

TEMPO_STEP = 5
PAUSE_STEP = 0.25
VOLUME_STEP = 0.05


def _staff_rect() -> pygame.Rect:
    return pygame.Rect(
        config.SAFE_MARGIN,
        config.STAFF_TOP,
        config.WINDOW_WIDTH - 2 * config.SAFE_MARGIN,
        8 * config.STAFF_LINE_SPACING + 60,
    )


def _keyboard_rect() -> pygame.Rect:
    return pygame.Rect(
        config.SAFE_MARGIN,
        config.WINDOW_HEIGHT - config.KEYBOARD_HEIGHT - config.SAFE_MARGIN,
        config.WINDOW_WIDTH - 2 * config.SAFE_MARGIN,
        config.KEYBOARD_HEIGHT,
    )


class TrainerApp:
    def __init__(self, args: argparse.Namespace) -> None:
        pygame.mixer.pre_init(config.SAMPLE_RATE, size=-16, channels=1, buffer=512)
        pygame.init()
        pygame.display.set_caption("Ear Trainer")

        if args.fullscreen:
            display_info = pygame.display.Info()
            self.screen = pygame.display.set_mode(
                (display_info.current_w, display_info.current_h), pygame.FULLSCREEN | pygame.SCALED
            )
        else:
            self.screen = pygame.display.set_mode((config.WINDOW_WIDTH, config.WINDOW_HEIGHT), pygame.RESIZABLE)
        config.WINDOW_WIDTH, config.WINDOW_HEIGHT = self.screen.get_size()
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont(None, config.FONT_SIZE)

        real_clock = RealClock()
        self.settings = SettingsStore(args.settings)
        self.output = AudioOutput(open_backend, real_clock, volume=self.settings.settings.volume)
        self.samples = SampleTable(self.output.backend, args.samples)
        self.samples.load_instrument("piano", KEYBOARD_NOTES)

        exercises = load_exercises(args.exercises) + load_midi_exercises(args.midi_dir)
        logger.info("Loaded %d exercises", len(exercises))

        self.staff = StaffRenderer(_staff_rect())
        self.keyboard = KeyboardView(_keyboard_rect(), real_clock)
        self.controller = TrainerController(
            output=self.output,
            timers=TimerQueue(real_clock),
            staff=self.staff,
            exercises=exercises,
            settings=self.settings,
            samples=self.samples,
            keyboard=self.keyboard,
            instrument=args.instrument,
            tempo=args.tempo if args.tempo is not None else config.DEFAULT_TEMPO,
            pause_s=args.pause,
        )
        if args.tempo is None and self.controller.exercise is not None and self.controller.exercise.bpm:
            self.controller.set_tempo(self.controller.exercise.bpm)

        self.midi = MidiInputs(real_clock, on_status=self.controller.set_midi_status)
        self.held_keys: Set[int] = set()
        self.chips: list = []
        self.volume_rect = pygame.Rect(0, 0, 0, 0)
        self.instrument_rect = pygame.Rect(0, 0, 0, 0)
        self.buttons: dict[str, pygame.Rect] = {}

    def run(self, max_frames: int | None = None) -> int:
        frame = 0
        running = True
        try:
            while running:
                self.clock.tick(config.FPS)
                self._process_midi()
                running = self._process_events()
                self.controller.update()
                self._draw()
                frame += 1
                if max_frames is not None and frame >= max_frames:
                    break
        finally:
            self._cleanup()
        return 0

    def _process_midi(self) -> None:
        for data in self.midi.poll():
            self.controller.input.midi_message(data)

    def _process_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.VIDEORESIZE:
                self._resize(event.w, event.h)
            elif event.type == pygame.MOUSEWHEEL:
                state = self.controller.state
                if self.volume_rect.collidepoint(pygame.mouse.get_pos()):
                    self.controller.set_volume(self.settings.settings.volume + event.y * VOLUME_STEP)
                else:
                    state.scroll_x = max(0, state.scroll_x - int((event.x or event.y) * 60))
            elif event.type == pygame.KEYDOWN:
                repeat = event.key in self.held_keys
                self.held_keys.add(event.key)
                self._handle_key(event, repeat)
            elif event.type == pygame.KEYUP:
                self.held_keys.discard(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_click(event.pos)
        return True

    def _handle_key(self, event: pygame.event.Event, repeat: bool) -> None:
        controller = self.controller
        if event.key == pygame.K_ESCAPE and not repeat:
            if controller.test.active:
                controller.stop_test()
            else:
                controller.stop()
        elif event.key == pygame.K_RETURN and not repeat:
            controller.play()
        elif event.key == pygame.K_F1 and not repeat:
            controller.start_test()
        elif event.key == pygame.K_F2 and not repeat:
            controller.stop_test()
        elif event.key == pygame.K_F5 and not repeat:
            controller.reset_audio_settings()
        elif event.key == pygame.K_TAB and not repeat:
            controller.cycle_instrument()
        elif event.key == pygame.K_UP:
            controller.set_tempo(controller.state.tempo + TEMPO_STEP)
        elif event.key == pygame.K_DOWN:
            controller.set_tempo(controller.state.tempo - TEMPO_STEP)
        elif event.key == pygame.K_PAGEUP:
            controller.set_pause(controller.state.pause_s + PAUSE_STEP)
        elif event.key == pygame.K_PAGEDOWN:
            controller.set_pause(controller.state.pause_s - PAUSE_STEP)
        elif event.key == pygame.K_RIGHT and not repeat:
            controller.next_exercise()
        elif event.key == pygame.K_LEFT and not repeat:
            controller.previous_exercise()
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            controller.set_volume(self.settings.settings.volume - VOLUME_STEP)
        elif event.key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
            controller.set_volume(self.settings.settings.volume + VOLUME_STEP)
        else:
            controller.input.key_down(event.unicode, repeat)

    def _handle_click(self, position: tuple[int, int]) -> None:
        controller = self.controller
        note = self.keyboard.hit_test(position)
        if note is not None:
            controller.input.click(note)
            return

        for rect, idx in self.chips:
            if rect.collidepoint(position):
                controller.select_exercise(idx)
                return
        if self.instrument_rect.collidepoint(position):
            controller.cycle_instrument()
            return
        if self.volume_rect.collidepoint(position):
            rel = (position[0] - self.volume_rect.x) / max(1, self.volume_rect.w)
            controller.set_volume(rel)
            return

        actions = {
            "play": controller.play,
            "stop": controller.stop,
            "start_test": controller.start_test,
            "stop_test": controller.stop_test,
            "tempo_down": lambda: controller.set_tempo(controller.state.tempo - TEMPO_STEP),
            "tempo_up": lambda: controller.set_tempo(controller.state.tempo + TEMPO_STEP),
            "pause_down": lambda: controller.set_pause(controller.state.pause_s - PAUSE_STEP),
            "pause_up": lambda: controller.set_pause(controller.state.pause_s + PAUSE_STEP),
        }
        for name, rect in self.buttons.items():
            if rect.collidepoint(position):
                actions[name]()
                return

    def _resize(self, width: int, height: int) -> None:
        config.WINDOW_WIDTH, config.WINDOW_HEIGHT = width, height
        self.staff.resize(_staff_rect())
        self.keyboard.resize(_keyboard_rect())

    def _draw(self) -> None:
        controller = self.controller
        state = controller.state
        self._draw_background()

        self.chips, self.volume_rect, self.instrument_rect = draw_topbar(
            self.screen,
            self.font,
            state.exercises,
            state.selected_idx,
            state.scroll_x,
            self.settings.settings.volume,
            controller.instrument,
        )
        self.buttons = draw_controls(
            self.screen,
            self.font,
            state.tempo,
            state.pause_s,
            controller.scheduler.is_playing,
            controller.test.active,
        )

        y = config.TOPBAR_HEIGHT + config.CONTROLS_HEIGHT + 10
        exercise = controller.exercise
        if exercise is not None:
            self.screen.blit(self.font.render(exercise.title, True, config.HUD_COLOR), (16, y))
            self.screen.blit(self.font.render(exercise.text, True, config.MUTED_TEXT), (16, y + 22))

        self.staff.draw(self.screen, self.font)

        session = controller.test.session
        info_y = self.staff.rect.bottom + 12
        info_text = f"{controller.display_status} •{session.score_text} • {controller.midi_status}"
        self.screen.blit(self.font.render(info_text, True, config.HUD_COLOR), (16, info_y))

        hint_text = "Enter play • Esc stop • F1/F2 test • Up/Down tempo • PgUp/PgDn pause • Tab instrument • z../ notes"
        self.screen.blit(self.font.render(hint_text, True, config.MUTED_TEXT), (16, info_y + 24))

        self.keyboard.draw(self.screen)
        pygame.display.flip()

    def _draw_background(self) -> None:
        top = pygame.Color(*config.BACKGROUND_COLOR_TOP)
        bottom = pygame.Color(*config.BACKGROUND_COLOR_BOTTOM)
        for y in range(config.WINDOW_HEIGHT):
            lerp = y / max(1, config.WINDOW_HEIGHT - 1)
            r = int(top.r + (bottom.r - top.r) * lerp)
            g = int(top.g + (bottom.g - top.g) * lerp)
            b = int(top.b + (bottom.b - top.b) * lerp)
            pygame.draw.line(self.screen, (r, g, b), (0, y), (config.WINDOW_WIDTH, y))

    def _cleanup(self) -> None:
        self.controller.shutdown()
        self.midi.close()
        pygame.quit()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Hear a note, find it on the keyboard.")
    ap.add_argument("--exercises", default=config.EXERCISES_PATH, help="exercise list (JSON)")
    ap.add_argument("--midi-dir", default=config.MIDI_DIR, help="folder of .mid files imported as exercises")
    ap.add_argument("--samples", default=config.SAMPLES_DIR, help="sample root, <root>/<instrument>/<note>.wav")
    ap.add_argument("--instrument", default=config.DEFAULT_INSTRUMENT, choices=sorted(config.INSTRUMENTS))
    ap.add_argument("--tempo", type=int, default=None, help=f"BPM, {config.TEMPO_MIN}-{config.TEMPO_MAX}")
    ap.add_argument("--pause", type=float, default=config.DEFAULT_PAUSE_SEC, help="seconds before each test note")
    ap.add_argument("--settings", default=config.SETTINGS_PATH, help="audio settings file (JSON)")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--fullscreen", dest="fullscreen", action="store_true", default=config.FULLSCREEN)
    mode.add_argument("--windowed", dest="fullscreen", action="store_false")
    return ap.parse_args(argv)


def run(*, max_frames: int | None = None, args: argparse.Namespace | None = None) -> int:
    app = TrainerApp(args if args is not None else parse_args([]))
    return app.run(max_frames)


def _init_logging() -> None:
    if logging.getLogger().handlers:
        return

    logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)
    try:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(config.LOG_DIR, "ear_trainer.log"), maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)
    except OSError as exc:
        logger.warning("File logging disabled: %s", exc)


def main() -> int:
    """Console entrypoint for the trainer."""
    _init_logging()
    args = parse_args()
    try:
        return run(args=args)
    except Exception:
        logger.exception("Ear trainer crashed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
