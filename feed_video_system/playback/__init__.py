"""
Playback Module for the Feed Video System.

Limits concurrently playing feed videos and tracks preloaded URLs.
"""

from .domain.models import PlaybackCommand, VideoInstance, PreloadEntry, PlaybackStatus, PreloadStatus
from .domain.interfaces import VideoHandle
from .application.slot_manager import VideoSlotManager
from .application.preload_service import PreloadCache, PreloadScheduler
from .integration import PlaybackModule, create_playback_module

__all__ = [
    "PlaybackCommand",
    "VideoInstance",
    "PreloadEntry",
    "PlaybackStatus",
    "PreloadStatus",
    "VideoHandle",
    "VideoSlotManager",
    "PreloadCache",
    "PreloadScheduler",
    "PlaybackModule",
    "create_playback_module",
]
