"""
Locked product models for the cart.

A locked product is reserved for a fixed duration; once its countdown hits
zero it drops out of the cart. All datetimes are timezone-aware UTC.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from ..core.config import CartLockConfig
from ..core.timezone_utils import ensure_utc, utc_now

CATEGORIES = ("products", "service")

_DEFAULT_CASHBACK = {
    "products": "Upto 12% cash back",
    "service": "Upto 15% cash back",
}


class LockStatus(Enum):
    """Countdown state of a locked product"""
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"


@dataclass(frozen=True)
class LockedProduct:
    """A product reserved in the cart until ``expires_at``"""
    id: str
    product_id: str
    name: str
    price: float
    image: str
    cashback: str
    category: str
    locked_at: datetime
    expires_at: datetime
    lock_duration_seconds: float
    remaining_seconds: float
    status: LockStatus

    @property
    def is_expired(self) -> bool:
        return self.remaining_seconds <= 0


def get_lock_status(remaining_seconds: float, config: Optional[CartLockConfig] = None) -> LockStatus:
    config = config or CartLockConfig()
    if remaining_seconds <= 0:
        return LockStatus.EXPIRED
    if remaining_seconds <= config.expiring_threshold_seconds:
        return LockStatus.EXPIRING
    return LockStatus.ACTIVE


def create_locked_product(
    product_id: str,
    name: str,
    price: float,
    image: str = "",
    category: str = "products",
    cashback: Optional[str] = None,
    now: Optional[datetime] = None,
    config: Optional[CartLockConfig] = None,
) -> LockedProduct:
    """Lock a product starting at ``now`` for the configured duration"""
    if not product_id:
        raise ValueError("Product ID cannot be empty")
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category!r}")
    if price < 0:
        raise ValueError("Price cannot be negative")

    config = config or CartLockConfig()
    locked_at = ensure_utc(now) if now else utc_now()
    duration = float(config.default_duration_seconds)

    return LockedProduct(
        id=f"locked_{product_id}_{uuid.uuid4().hex[:8]}",
        product_id=product_id,
        name=name,
        price=price,
        image=image,
        cashback=cashback or _DEFAULT_CASHBACK[category],
        category=category,
        locked_at=locked_at,
        expires_at=locked_at + timedelta(seconds=duration),
        lock_duration_seconds=duration,
        remaining_seconds=duration,
        status=get_lock_status(duration, config),
    )


def update_locked_product_timers(
    items: Iterable[LockedProduct],
    now: Optional[datetime] = None,
    config: Optional[CartLockConfig] = None,
) -> List[LockedProduct]:
    """Recompute remaining time for every lock and drop the expired ones"""
    now = ensure_utc(now) if now else utc_now()

    updated = []
    for item in items:
        remaining = max(0.0, (item.expires_at - now).total_seconds())
        if remaining <= 0:
            continue
        updated.append(replace(item, remaining_seconds=remaining, status=get_lock_status(remaining, config)))
    return updated


def calculate_locked_total(items: Iterable[LockedProduct]) -> float:
    return sum(item.price for item in items)


def get_locked_item_count(items: Iterable[LockedProduct]) -> int:
    return len(list(items))


def format_remaining_time(remaining_seconds: float) -> str:
    """Render a countdown as M:SS, or 'Expired'"""
    if remaining_seconds <= 0:
        return "Expired"

    minutes = int(remaining_seconds // 60)
    seconds = int(remaining_seconds % 60)
    return f"{minutes}:{seconds:02d}"
