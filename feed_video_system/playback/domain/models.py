"""
Playback Domain Models.

Entities and value objects for feed video playback. These models contain no
external dependencies and do not know about the UI layer beyond the opaque
handle they point at.
"""

import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional

from ...core.device import DevicePlatform

__all__ = [
    "DevicePlatform",
    "PlaybackCommand",
    "VideoInstance",
    "PreloadEntry",
    "PlaybackStatus",
    "PreloadStatus",
]


@dataclass(frozen=True)
class PlaybackCommand:
    """Status update sent to a native video handle"""
    should_play: bool
    is_looping: Optional[bool] = None
    is_muted: Optional[bool] = None
    volume: Optional[float] = None

    @classmethod
    def play(cls) -> "PlaybackCommand":
        """Feed videos always play looped and silent"""
        return cls(should_play=True, is_looping=True, is_muted=True, volume=0.0)

    @classmethod
    def pause(cls) -> "PlaybackCommand":
        return cls(should_play=False)


def _weak_handle(handle: Any) -> Optional[Callable[[], Any]]:
    if handle is None:
        return None
    try:
        return weakref.ref(handle)
    except TypeError:
        # Some objects (ints, slotted classes) cannot be weakly referenced
        return lambda: handle


class VideoInstance:
    """A mounted video tile known to the slot manager.

    The handle belongs to the UI layer. Only a weak reference is kept, so a
    tile that is torn down without unregistering does not stay alive here;
    its handle simply resolves to None.
    """

    def __init__(self, video_id: str, handle: Any = None):
        if not video_id:
            raise ValueError("Video ID cannot be empty")
        self.video_id = video_id
        self._handle_ref = _weak_handle(handle)
        self.is_playing = False
        self.is_loaded = False
        self.registered_at = datetime.now()
        self.started_at: Optional[datetime] = None

    @property
    def handle(self) -> Any:
        if self._handle_ref is None:
            return None
        return self._handle_ref()

    def replace_handle(self, handle: Any) -> None:
        self._handle_ref = _weak_handle(handle)

    def __repr__(self) -> str:
        return f"VideoInstance(video_id={self.video_id!r}, is_playing={self.is_playing}, is_loaded={self.is_loaded})"


@dataclass(frozen=True)
class PreloadEntry:
    """A URL marked as warmed. Bookkeeping only, no bytes are fetched."""
    url: str
    warmed_at: datetime = field(default_factory=datetime.now)
    ready: bool = True


@dataclass(frozen=True)
class PlaybackStatus:
    """Snapshot of the slot manager"""
    total_videos: int
    currently_playing: int
    max_simultaneous: int
    playing_ids: List[str]

    @property
    def free_slots(self) -> int:
        return max(0, self.max_simultaneous - self.currently_playing)


@dataclass(frozen=True)
class PreloadStatus:
    """Snapshot of the preload cache and scheduler"""
    preloaded_count: int
    max_preloaded: int
    is_preloading: bool
    preloaded_urls: List[str]
