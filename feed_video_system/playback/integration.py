"""
Playback Module Integration.

Composition root for the feed playback services. One PlaybackModule is owned
by the feed screen and handed to every tile; it is created when the feed
opens and shut down when it closes.
"""

import logging
from typing import Optional

from ..core.config import Config
from ..core.device import DevicePlatform, capacity_for, detect_platform
from ..core.events import EventSystem
from ..core.logging_config import get_error_tracker

from .application.slot_manager import VideoSlotManager
from .application.preload_service import PreloadCache, PreloadScheduler


class PlaybackModule:
    """Wires the slot manager, preload cache and preload scheduler together"""

    def __init__(
        self,
        config: Config,
        event_system: Optional[EventSystem] = None,
        device_platform: Optional[DevicePlatform] = None,
    ):
        self.config = config
        self.event_system = event_system
        self.device_platform = device_platform or detect_platform(config.playback.platform)
        self.logger = logging.getLogger(__name__)
        self.error_tracker = get_error_tracker("playback")

        self._initialize_services()

        self.logger.info(
            f"Playback module initialized for {self.device_platform.value}: "
            f"{self.slot_manager.max_simultaneous} simultaneous videos, "
            f"{self.preload_cache.max_preloaded} preloaded"
        )

    def _initialize_services(self):
        playback = self.config.playback
        preload = self.config.preload

        self.slot_manager = VideoSlotManager(
            max_simultaneous=capacity_for(self.device_platform, playback.max_simultaneous_ios, playback.max_simultaneous_default),
            event_system=self.event_system,
            error_tracker=self.error_tracker,
        )

        self.preload_cache = PreloadCache(
            max_preloaded=capacity_for(self.device_platform, preload.max_preloaded_ios, preload.max_preloaded_default),
            event_system=self.event_system,
        )

        self.preload_scheduler = PreloadScheduler(
            cache=self.preload_cache,
            inter_task_delay_seconds=preload.inter_task_delay_ms / 1000.0,
        )

    async def shutdown(self):
        """Cancel pending preloads, stop all playback and clear bookkeeping"""
        try:
            await self.preload_scheduler.cancel()
            await self.slot_manager.shutdown()
            self.preload_cache.clear()
            self.logger.info("Playback module shut down")
        except Exception as e:
            self.error_tracker.log_error(e, "shutdown")

    def get_module_status(self) -> dict:
        status = self.slot_manager.get_status()
        preload_status = self.preload_scheduler.get_status()
        return {
            "platform": self.device_platform.value,
            "max_simultaneous": status.max_simultaneous,
            "currently_playing": status.currently_playing,
            "total_videos": status.total_videos,
            "max_preloaded": preload_status.max_preloaded,
            "preloaded_count": preload_status.preloaded_count,
            "is_preloading": preload_status.is_preloading,
            "errors": self.error_tracker.get_error_stats(),
        }


def create_playback_module(config: Config, event_system: Optional[EventSystem] = None) -> PlaybackModule:
    """Factory function to create a configured playback module"""
    return PlaybackModule(config=config, event_system=event_system)
