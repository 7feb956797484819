"""
In-memory Video Handle.

Stands in for a native player when no decoder is attached: it remembers the
last command it received and can be told to reject commands, which is how
the HTTP surface simulates feed tiles.
"""

import asyncio
import logging
from typing import List, Optional

from ..domain.interfaces import VideoHandle
from ..domain.models import PlaybackCommand


class NativePlaybackError(RuntimeError):
    """Raised when a player rejects a playback command"""


class InMemoryVideoHandle(VideoHandle):
    """Video handle that records commands instead of driving a decoder"""

    def __init__(self, name: str = "", fail_play: bool = False, fail_pause: bool = False, latency_seconds: float = 0.0):
        self.name = name
        self.fail_play = fail_play
        self.fail_pause = fail_pause
        self.latency_seconds = latency_seconds
        self.commands: List[PlaybackCommand] = []
        self.logger = logging.getLogger(__name__)

    async def set_status(self, command: PlaybackCommand) -> None:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        if command.should_play and self.fail_play:
            raise NativePlaybackError(f"Player {self.name or id(self)} refused to play")
        if not command.should_play and self.fail_pause:
            raise NativePlaybackError(f"Player {self.name or id(self)} refused to pause")

        self.commands.append(command)
        self.logger.debug(f"Handle {self.name}: {command}")

    @property
    def last_command(self) -> Optional[PlaybackCommand]:
        return self.commands[-1] if self.commands else None

    @property
    def is_playing(self) -> bool:
        last = self.last_command
        return bool(last and last.should_play)
