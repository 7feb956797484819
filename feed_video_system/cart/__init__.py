"""
Cart locked-product countdown.
"""

from .models import (
    LockStatus,
    LockedProduct,
    get_lock_status,
    create_locked_product,
    update_locked_product_timers,
    calculate_locked_total,
    get_locked_item_count,
    format_remaining_time,
)
from .lock_timer import LockExpiryTimer

__all__ = [
    "LockStatus",
    "LockedProduct",
    "get_lock_status",
    "create_locked_product",
    "update_locked_product_timers",
    "calculate_locked_total",
    "get_locked_item_count",
    "format_remaining_time",
    "LockExpiryTimer",
]
