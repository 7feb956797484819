"""
Playback Application Layer.

Contains the services that coordinate playback slots and preload bookkeeping.
"""

from .slot_manager import VideoSlotManager
from .preload_service import PreloadCache, PreloadScheduler

__all__ = [
    "VideoSlotManager",
    "PreloadCache",
    "PreloadScheduler",
]
