import asyncio
import json
import logging
from datetime import datetime, timedelta

import pytest
import pytz

from feed_video_system.main import FeedVideoSystem
from feed_video_system.playback.infrastructure.handles import InMemoryVideoHandle


@pytest.fixture
def system(tmp_path, monkeypatch):
    monkeypatch.setenv("FEED_PLATFORM", "ios")
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"system": {"log_file": None, "enable_api": False}}))
    return FeedVideoSystem(str(config_file), install_signal_handlers=False)


def test_wires_components_for_platform(system):
    status = system.get_system_status()

    assert status["running"] is False
    assert status["playback"]["platform"] == "ios"
    assert status["playback"]["max_simultaneous"] == 2
    assert status["components"]["lock_timer"] == {"running": False, "locks": 0, "expired": 0}


def test_start_fails_when_api_disabled(system):
    assert system.start() is False
    assert system.is_running() is False


def test_counts_expired_locks(system):
    system.lock_timer.lock("p1", "Sneakers", 59.0, now=datetime.now(pytz.UTC) - timedelta(hours=1))

    system.lock_timer.tick()

    assert system.expired_lock_count == 1
    assert system.get_system_status()["components"]["lock_timer"]["expired"] == 1


def test_failed_starts_are_tracked(system):
    handle = InMemoryVideoHandle(name="bad", fail_play=True)
    system.playback_module.slot_manager.register("bad", handle)

    assert asyncio.run(system.playback_module.slot_manager.start("bad")) is False
    assert system.error_tracker.warning_count == 1


def test_log_level_override_reaches_console_handler(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"system": {"log_file": None, "log_level": "WARNING", "enable_api": False}}))

    system = FeedVideoSystem(str(config_file), install_signal_handlers=False, log_level="DEBUG")

    root = logging.getLogger()
    console = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert root.level == logging.DEBUG
    assert console and console[0].level == logging.DEBUG
    assert system.config.system.log_level == "DEBUG"
    assert json.loads(config_file.read_text())["system"]["log_level"] == "WARNING"
