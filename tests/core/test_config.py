import json

import pytest

from feed_video_system.core.config import CartLockConfig, Config, PlaybackConfig, PreloadConfig


def test_missing_file_writes_defaults(tmp_path):
    path = tmp_path / "config.json"

    config = Config(str(path))

    assert path.exists()
    saved = json.loads(path.read_text())
    assert saved["playback"]["max_simultaneous_ios"] == 2
    assert saved["playback"]["max_simultaneous_default"] == 4
    assert saved["preload"]["max_preloaded_ios"] == 3
    assert saved["preload"]["max_preloaded_default"] == 5
    assert saved["cart_lock"]["default_duration_seconds"] == 900
    assert config.system.api_port == 8000


def test_loads_sections_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "playback": {"platform": "ios", "max_simultaneous_ios": 1},
        "cart_lock": {"default_duration_seconds": 60},
    }))

    config = Config(str(path))

    assert config.playback.platform == "ios"
    assert config.playback.max_simultaneous_ios == 1
    assert config.playback.max_simultaneous_default == 4
    assert config.cart_lock.default_duration_seconds == 60
    assert config.preload == PreloadConfig()


def test_invalid_section_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "playback": {"max_simultaneous_default": 0},
        "preload": {"unknown_key": 1},
        "cart_lock": {"update_interval_seconds": 0.5},
    }))

    config = Config(str(path))

    assert config.playback == PlaybackConfig()
    assert config.preload == PreloadConfig()
    assert config.cart_lock.update_interval_seconds == 0.5


def test_corrupt_file_keeps_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    config = Config(str(path))

    assert config.playback == PlaybackConfig()
    assert path.read_text() == "{not json"


def test_update_section_persists(tmp_path):
    path = tmp_path / "config.json"
    config = Config(str(path))

    assert config.update_section("preload", inter_task_delay_ms=250) is True
    assert config.update_section("nonexistent", value=1) is False

    reloaded = Config(str(path))
    assert reloaded.preload.inter_task_delay_ms == 250


@pytest.mark.parametrize(
    "section, changes",
    [
        ("playback", {"max_simultaneous_ios": 0}),
        ("preload", {"inter_task_delay_ms": -5}),
        ("cart_lock", {"no_such_field": 1}),
    ],
)
def test_rejected_update_leaves_section_unchanged(tmp_path, section, changes):
    path = tmp_path / "config.json"
    config = Config(str(path))
    before = getattr(config, section)
    saved = path.read_text()

    assert config.update_section(section, **changes) is False

    assert getattr(config, section) == before
    assert path.read_text() == saved
    assert Config(str(path)).playback.max_simultaneous_ios == 2


@pytest.mark.parametrize(
    "factory",
    [
        lambda: PlaybackConfig(max_simultaneous_ios=0),
        lambda: PreloadConfig(max_preloaded_default=0),
        lambda: PreloadConfig(inter_task_delay_ms=-1),
        lambda: CartLockConfig(default_duration_seconds=0),
        lambda: CartLockConfig(update_interval_seconds=0),
    ],
)
def test_section_validation(factory):
    with pytest.raises(ValueError):
        factory()
