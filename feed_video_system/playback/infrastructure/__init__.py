"""
Playback Infrastructure Layer.

Contains implementations of domain interfaces.
"""

from .handles import InMemoryVideoHandle, NativePlaybackError

__all__ = [
    "InMemoryVideoHandle",
    "NativePlaybackError",
]
