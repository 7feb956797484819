"""
Locked product expiry timer.

A fixed-interval polling loop over the cart's locked products. Each tick
recomputes remaining time and removes whatever reached zero. There is no
drift correction; a lock may outlive its expiry by up to one interval.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from ..core.config import CartLockConfig
from ..core.events import EventPublisher, EventSystem, EventType
from .models import (
    LockedProduct,
    calculate_locked_total,
    create_locked_product,
    update_locked_product_timers,
)


class LockExpiryTimer(EventPublisher):
    """Owns the list of locked products and expires them on a timer"""

    SOURCE = "lock_timer"

    def __init__(self, config: Optional[CartLockConfig] = None, event_system: Optional[EventSystem] = None):
        self.config = config or CartLockConfig()
        self.event_system = event_system
        self.logger = logging.getLogger(__name__)

        self._locks: List[LockedProduct] = []
        self._task: Optional[asyncio.Task] = None

    # Lock management
    def lock(self, product_id: str, name: str, price: float, image: str = "", category: str = "products",
             cashback: Optional[str] = None, now: Optional[datetime] = None) -> LockedProduct:
        locked = create_locked_product(product_id, name, price, image, category, cashback, now=now, config=self.config)
        self._locks.append(locked)

        self.logger.info(f"Locked product {product_id} as {locked.id} until {locked.expires_at.isoformat()}")
        self._publish(EventType.LOCK_CREATED, {"lock_id": locked.id, "product_id": product_id, "expires_at": locked.expires_at.isoformat()})
        return locked

    def unlock(self, lock_id: str) -> bool:
        """Release a lock before it expires"""
        remaining = [item for item in self._locks if item.id != lock_id]
        if len(remaining) == len(self._locks):
            return False

        self._locks = remaining
        self.logger.info(f"Unlocked {lock_id}")
        self._publish(EventType.LOCK_RELEASED, {"lock_id": lock_id})
        return True

    def get_lock(self, lock_id: str) -> Optional[LockedProduct]:
        for item in self._locks:
            if item.id == lock_id:
                return item
        return None

    @property
    def locks(self) -> List[LockedProduct]:
        return list(self._locks)

    @property
    def count(self) -> int:
        return len(self._locks)

    @property
    def total(self) -> float:
        return calculate_locked_total(self._locks)

    # Polling
    def tick(self, now: Optional[datetime] = None) -> List[LockedProduct]:
        """One polling step. Returns the locks that expired and were removed."""
        updated = update_locked_product_timers(self._locks, now=now, config=self.config)
        kept_ids = {item.id for item in updated}
        expired = [item for item in self._locks if item.id not in kept_ids]
        self._locks = updated

        if expired:
            self.logger.info(f"Removed {len(expired)} expired locked product(s)")
            for item in expired:
                self._publish(EventType.LOCK_EXPIRED, {"lock_id": item.id, "product_id": item.product_id})
        return expired

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the polling loop on the running event loop"""
        if self.is_running:
            self.logger.warning("Lock expiry timer is already running")
            return

        self._task = asyncio.get_running_loop().create_task(self._run())
        self.logger.info(f"Lock expiry timer started (interval {self.config.update_interval_seconds}s)")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return

        task.cancel()
        # wait() never raises the task's own CancelledError, only the caller's
        await asyncio.wait([task])
        self.logger.info("Lock expiry timer stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.config.update_interval_seconds)
            try:
                self.tick()
            except Exception as e:
                self.logger.error(f"Error updating locked product timers: {e}")
