"""
Playback Domain Interfaces.

Abstract contract between the slot manager and whatever actually drives a
video decoder. The manager never depends on a concrete player.
"""

from abc import ABC, abstractmethod

from .models import PlaybackCommand


class VideoHandle(ABC):
    """Native video player handle owned by a feed tile"""

    @abstractmethod
    async def set_status(self, command: PlaybackCommand) -> None:
        """Apply a playback command. Raises if the native layer rejects it."""
        pass
