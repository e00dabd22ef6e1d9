from __future__ import annotations

import json

import pytest

from ear_trainer.settings import AudioSettings, SettingsStore


def test_defaults() -> None:
    settings = AudioSettings()
    assert settings.volume == pytest.approx(0.8)
    assert settings.midi_gain_cap == pytest.approx(0.5)
    assert settings.midi_curve == pytest.approx(1.5)
    assert settings.midi_attack_s == pytest.approx(0.005)
    assert settings.midi_release_s == pytest.approx(0.05)


def test_clamped_forces_ranges_and_replaces_junk() -> None:
    settings = AudioSettings(
        volume=3, midi_gain_cap=-1, midi_curve="steep", midi_attack_s=0.5, midi_release_s=1.0
    ).clamped()
    assert settings.volume == 1.0
    assert settings.midi_gain_cap == 0.0
    assert settings.midi_curve == pytest.approx(1.5)
    assert settings.midi_attack_s == pytest.approx(0.05)
    assert settings.midi_release_s == pytest.approx(0.2)


def test_store_round_trips_through_json(tmp_path) -> None:
    path = tmp_path / "audio.json"
    store = SettingsStore(path)
    store.update(volume=0.3, midi_curve=2.0)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["volume"] == pytest.approx(0.3)
    reloaded = SettingsStore(path).settings
    assert reloaded.midi_curve == pytest.approx(2.0)


def test_unreadable_or_foreign_files_yield_defaults(tmp_path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert SettingsStore(broken).settings == AudioSettings()

    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]", encoding="utf-8")
    assert SettingsStore(listed).settings == AudioSettings()

    extra = tmp_path / "extra.json"
    extra.write_text(json.dumps({"volume": 0.1, "theme": "dark"}), encoding="utf-8")
    assert SettingsStore(extra).settings.volume == pytest.approx(0.1)


def test_reset_restores_and_saves_defaults(tmp_path) -> None:
    path = tmp_path / "audio.json"
    store = SettingsStore(path)
    store.update(volume=0.1)
    store.reset()
    assert SettingsStore(path).settings == AudioSettings()


def test_store_without_path_keeps_settings_in_memory() -> None:
    store = SettingsStore(None)
    assert store.update(volume=0.4).volume == pytest.approx(0.4)
