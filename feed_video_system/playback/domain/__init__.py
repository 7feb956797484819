"""
Playback Domain Layer.

Contains pure business logic and domain models for feed video playback.
No external dependencies - only Python standard library and domain concepts.
"""

from .models import DevicePlatform, PlaybackCommand, VideoInstance, PreloadEntry, PlaybackStatus, PreloadStatus
from .interfaces import VideoHandle

__all__ = [
    "DevicePlatform",
    "PlaybackCommand",
    "VideoInstance",
    "PreloadEntry",
    "PlaybackStatus",
    "PreloadStatus",
    "VideoHandle",
]
