"""Smoke tests for the pygame UI.

The application's main loop should start, run a handful of frames and shut
down without raising when SDL's dummy drivers stand in for a screen and a
sound card. Rendering correctness is not checked here.
"""

from __future__ import annotations

import os

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


def test_app_runs_headless(tmp_path) -> None:
    """Ensure the application can start and run a few frames headlessly."""
    # Import inside the test so that environment variables take effect
    from ear_trainer.app import parse_args, run

    args = parse_args(
        [
            "--windowed",
            "--settings",
            str(tmp_path / "audio.json"),
            "--midi-dir",
            str(tmp_path),
            "--samples",
            str(tmp_path / "samples"),
        ]
    )
    exit_code = run(max_frames=3, args=args)
    assert exit_code == 0
