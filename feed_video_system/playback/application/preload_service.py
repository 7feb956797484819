"""
Video Preload Application Service.

Tracks which feed video URLs have been warmed ahead of playback and paces
batch warming so the event loop is never monopolised. No bytes are fetched;
the cache is bookkeeping that lets tiles near the visible one start faster.
"""

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime
from typing import List, Optional, Sequence

from ...core.events import EventPublisher, EventSystem, EventType
from ..domain.models import PreloadEntry, PreloadStatus


class PreloadCache(EventPublisher):
    """Capacity-bounded FIFO map of warmed URLs.

    Entries are never touched again after insertion, so overflow always
    removes the entry that was inserted first.
    """

    SOURCE = "preload_cache"

    def __init__(self, max_preloaded: int, event_system: Optional[EventSystem] = None):
        if max_preloaded < 1:
            raise ValueError("max_preloaded must be at least 1")

        self.max_preloaded = max_preloaded
        self.event_system = event_system
        self.logger = logging.getLogger(__name__)
        self._entries: "OrderedDict[str, PreloadEntry]" = OrderedDict()

    def preload(self, url: str) -> bool:
        """Mark a URL as warmed. Always succeeds."""
        if url in self._entries:
            return True

        if len(self._entries) >= self.max_preloaded:
            oldest_url, _ = self._entries.popitem(last=False)
            self.logger.debug(f"Preload cache full, evicted {oldest_url}")
            self._publish(EventType.PRELOAD_EVICTED, {"url": oldest_url, "reason": "capacity"})

        self._entries[url] = PreloadEntry(url=url, warmed_at=datetime.now())
        self.logger.info(f"Video marked for optimized loading: {url}")
        self._publish(EventType.PRELOAD_WARMED, {"url": url, "preloaded_count": len(self._entries)})
        return True

    def is_preloaded(self, url: str) -> bool:
        return url in self._entries

    def get_entry(self, url: str) -> Optional[PreloadEntry]:
        return self._entries.get(url)

    def evict(self, url: str) -> bool:
        """Remove one URL; returns whether it was tracked"""
        if self._entries.pop(url, None) is None:
            return False

        self.logger.info(f"Removed video from cache: {url}")
        self._publish(EventType.PRELOAD_EVICTED, {"url": url, "reason": "explicit"})
        return True

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self.logger.info(f"Cleared all video cache entries ({count})")
        return count

    @property
    def urls(self) -> List[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries


class PreloadScheduler:
    """Sequential, paced, cancellable batch warming on top of a PreloadCache"""

    def __init__(self, cache: PreloadCache, inter_task_delay_seconds: float = 0.1):
        if inter_task_delay_seconds < 0:
            raise ValueError("inter_task_delay_seconds cannot be negative")

        self.cache = cache
        self.inter_task_delay_seconds = inter_task_delay_seconds
        self.logger = logging.getLogger(__name__)

        self._is_preloading = False
        self._task: Optional[asyncio.Task] = None

    @staticmethod
    def prioritize(urls: Sequence[str], priority_index: int, limit: int) -> List[str]:
        """Order URLs by distance from the visible index, closest first.

        The sort is stable, so at equal distance the earlier feed item wins.
        """
        ranked = sorted(enumerate(urls), key=lambda item: abs(item[0] - priority_index))
        return [url for _, url in ranked[:max(0, limit)]]

    @property
    def is_preloading(self) -> bool:
        return self._is_preloading

    async def preload_batch(self, urls: Sequence[str], priority_index: int = 0) -> int:
        """
        Warm the URLs nearest ``priority_index``, one at a time.

        A batch that arrives while another is running is ignored and 0 is
        returned. Otherwise returns how many URLs were processed.
        """
        if self._is_preloading:
            self.logger.debug("Preload batch already running, ignoring new batch")
            return 0

        self._is_preloading = True
        processed = 0
        try:
            for url in self.prioritize(urls, priority_index, self.cache.max_preloaded):
                self.cache.preload(url)
                processed += 1
                # Yield between preloads so tiles keep rendering
                await asyncio.sleep(self.inter_task_delay_seconds)
        finally:
            self._is_preloading = False

        return processed

    def schedule_batch(self, urls: Sequence[str], priority_index: int = 0) -> asyncio.Task:
        """Run preload_batch in the background. Must be called inside a running loop.

        While a scheduled batch is still in flight it is returned unchanged and
        the new URLs are dropped.
        """
        if self._task is not None and not self._task.done():
            return self._task

        self._task = asyncio.get_running_loop().create_task(self.preload_batch(list(urls), priority_index))
        return self._task

    async def cancel(self) -> bool:
        """Cancel the scheduled batch, keeping whatever was already warmed"""
        task = self._task
        self._task = None
        if task is None or task.done():
            return False

        task.cancel()
        # wait() never raises the task's own CancelledError, only the caller's
        await asyncio.wait([task])

        self.logger.info("Preload batch cancelled")
        return True

    def get_status(self) -> PreloadStatus:
        return PreloadStatus(
            preloaded_count=len(self.cache),
            max_preloaded=self.cache.max_preloaded,
            is_preloading=self._is_preloading,
            preloaded_urls=self.cache.urls,
        )
