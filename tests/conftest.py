"""
Shared fixtures for the Feed Video System tests.
"""

import pytest

from feed_video_system.core.config import Config
from feed_video_system.core.events import EventSystem


@pytest.fixture
def event_system():
    return EventSystem()


@pytest.fixture
def config(tmp_path, monkeypatch):
    """A config backed by a temporary file, with no host platform leaking in"""
    monkeypatch.delenv("FEED_PLATFORM", raising=False)
    cfg = Config(str(tmp_path / "config.json"))
    cfg.system.log_file = None
    cfg.preload.inter_task_delay_ms = 0
    cfg.cart_lock.update_interval_seconds = 0.01
    return cfg
