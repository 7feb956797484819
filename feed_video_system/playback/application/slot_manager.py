"""
Video Slot Manager.

Caps how many feed videos are instructed to play at once. iOS devices run
out of hardware decoders quickly, so the feed never asks for more than
``max_simultaneous`` playing tiles; starting one more evicts the video that
was started first.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...core.events import EventPublisher, EventSystem, EventType
from ...core.logging_config import ErrorTracker
from ..domain.models import PlaybackCommand, PlaybackStatus, VideoInstance


class VideoSlotManager(EventPublisher):
    """Registry of mounted video tiles plus a FIFO-bounded set of playing ones.

    Eviction is strictly by start order. A video that was started long ago
    but is still on screen can be evicted in favour of a newer one; there is
    no visibility ranking.
    """

    SOURCE = "slot_manager"

    def __init__(
        self,
        max_simultaneous: int,
        event_system: Optional[EventSystem] = None,
        error_tracker: Optional[ErrorTracker] = None,
    ):
        if max_simultaneous < 1:
            raise ValueError("max_simultaneous must be at least 1")

        self.max_simultaneous = max_simultaneous
        self.event_system = event_system
        self.error_tracker = error_tracker
        self.logger = logging.getLogger(__name__)

        self._videos: Dict[str, VideoInstance] = {}
        self._playing: List[str] = []  # Oldest first
        self._lock = asyncio.Lock()

    # Registry
    def register(self, video_id: str, handle: Any) -> VideoInstance:
        """Register a tile's handle. Re-registering replaces the handle."""
        video = self._videos.get(video_id)
        if video is None:
            video = VideoInstance(video_id, handle)
            self._videos[video_id] = video
            self.logger.debug(f"Video registered: {video_id}")
        else:
            video.replace_handle(handle)
            self.logger.debug(f"Video handle replaced: {video_id}")

        self._publish(EventType.VIDEO_REGISTERED, {"video_id": video_id, "has_handle": handle is not None})
        return video

    async def unregister(self, video_id: str) -> None:
        """Stop the video if it is playing and forget it. Idempotent."""
        async with self._lock:
            if video_id in self._playing:
                await self._stop_locked(video_id)

            if self._videos.pop(video_id, None) is not None:
                self.logger.debug(f"Video unregistered: {video_id}")
                self._publish(EventType.VIDEO_UNREGISTERED, {"video_id": video_id})

    def set_loaded(self, video_id: str, loaded: bool) -> None:
        video = self._videos.get(video_id)
        if video:
            video.is_loaded = loaded

    # Playback
    async def start(self, video_id: str) -> bool:
        """
        Ask a registered video to play.

        Returns False when the id is unknown, its handle is gone, or the native
        play command failed. Callers must not assume playback began on False.
        """
        async with self._lock:
            video = self._videos.get(video_id)
            if video is None or video.handle is None:
                return False

            if video_id in self._playing:
                return True

            if len(self._playing) >= self.max_simultaneous:
                oldest_playing = self._playing[0]
                await self._stop_locked(oldest_playing)
                self._publish(EventType.VIDEO_EVICTED, {"video_id": oldest_playing, "replaced_by": video_id})

            # The eviction above may have dropped the last strong reference
            handle = video.handle
            if handle is None:
                return False

            try:
                await handle.set_status(PlaybackCommand.play())
            except Exception as e:
                self.logger.warning(f"Failed to start video {video_id}: {e}")
                if self.error_tracker:
                    self.error_tracker.log_warning(str(e), f"start:{video_id}")
                self._publish(EventType.VIDEO_START_FAILED, {"video_id": video_id, "error": str(e)})
                return False

            video.is_playing = True
            video.started_at = datetime.now()
            self._playing.append(video_id)

            self.logger.info(f"Video started: {video_id}, Currently playing: {len(self._playing)}")
            self._publish(EventType.VIDEO_STARTED, {"video_id": video_id, "currently_playing": len(self._playing)})
            return True

    async def stop(self, video_id: str) -> None:
        """Pause a playing video. No-op if it is not playing."""
        async with self._lock:
            if video_id in self._playing:
                await self._stop_locked(video_id)

    async def pause_all(self) -> int:
        """Stop every playing video, oldest first. Returns how many were stopped."""
        async with self._lock:
            playing = list(self._playing)
            for video_id in playing:
                await self._stop_locked(video_id)

        if playing:
            self.logger.info(f"Paused all videos ({len(playing)} stopped)")
        return len(playing)

    async def shutdown(self) -> None:
        """Stop everything and drop the registry"""
        await self.pause_all()
        self._videos.clear()
        self.logger.info("Video slot manager shut down")

    async def _stop_locked(self, video_id: str) -> None:
        """Release the slot; the native pause is best effort. Caller holds the lock."""
        video = self._videos.get(video_id)
        handle = video.handle if video else None

        if handle is not None:
            try:
                await handle.set_status(PlaybackCommand.pause())
            except Exception as e:
                self.logger.warning(f"Failed to stop video {video_id}: {e}")
                if self.error_tracker:
                    self.error_tracker.log_warning(str(e), f"stop:{video_id}")

        if video is not None:
            video.is_playing = False
            video.started_at = None
        self._playing = [playing_id for playing_id in self._playing if playing_id != video_id]

        self.logger.info(f"Video stopped: {video_id}, Currently playing: {len(self._playing)}")
        self._publish(EventType.VIDEO_STOPPED, {"video_id": video_id, "currently_playing": len(self._playing)})

    # Queries
    def is_registered(self, video_id: str) -> bool:
        return video_id in self._videos

    def is_playing(self, video_id: str) -> bool:
        return video_id in self._playing

    def get_video(self, video_id: str) -> Optional[VideoInstance]:
        return self._videos.get(video_id)

    @property
    def active_count(self) -> int:
        return len(self._playing)

    @property
    def playing_ids(self) -> List[str]:
        return list(self._playing)

    def get_status(self) -> PlaybackStatus:
        return PlaybackStatus(
            total_videos=len(self._videos),
            currently_playing=len(self._playing),
            max_simultaneous=self.max_simultaneous,
            playing_ids=list(self._playing),
        )
