from datetime import datetime, timedelta

import pytest
import pytz

from feed_video_system.cart import (
    LockStatus,
    calculate_locked_total,
    create_locked_product,
    format_remaining_time,
    get_lock_status,
    get_locked_item_count,
    update_locked_product_timers,
)
from feed_video_system.core.config import CartLockConfig

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=pytz.UTC)


def test_new_lock_lasts_fifteen_minutes():
    item = create_locked_product("p1", "Sneakers", 59.0, now=T0)

    assert item.expires_at - item.locked_at == timedelta(minutes=15)
    assert item.remaining_seconds == 900
    assert item.status is LockStatus.ACTIVE
    assert item.cashback == "Upto 12% cash back"
    assert item.id.startswith("locked_p1_")


def test_service_lock_uses_service_cashback():
    item = create_locked_product("s1", "Haircut", 20.0, category="service", now=T0)

    assert item.cashback == "Upto 15% cash back"


def test_explicit_cashback_is_kept():
    item = create_locked_product("p1", "Sneakers", 59.0, cashback="5% back", now=T0)

    assert item.cashback == "5% back"


def test_naive_now_is_treated_as_utc():
    item = create_locked_product("p1", "Sneakers", 59.0, now=datetime(2024, 5, 1, 12, 0, 0))

    assert item.locked_at == T0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"product_id": ""},
        {"category": "groceries"},
        {"price": -1.0},
    ],
)
def test_invalid_lock_arguments(kwargs):
    args = {"product_id": "p1", "name": "Sneakers", "price": 10.0, "now": T0}
    args.update(kwargs)

    with pytest.raises(ValueError):
        create_locked_product(**args)


def test_each_lock_gets_unique_id():
    first = create_locked_product("p1", "Sneakers", 59.0, now=T0)
    second = create_locked_product("p1", "Sneakers", 59.0, now=T0)

    assert first.id != second.id


@pytest.mark.parametrize(
    "remaining, expected",
    [
        (900, LockStatus.ACTIVE),
        (121, LockStatus.ACTIVE),
        (120, LockStatus.EXPIRING),
        (1, LockStatus.EXPIRING),
        (0, LockStatus.EXPIRED),
        (-5, LockStatus.EXPIRED),
    ],
)
def test_lock_status_thresholds(remaining, expected):
    assert get_lock_status(remaining) is expected


def test_expiring_threshold_is_configurable():
    config = CartLockConfig(expiring_threshold_seconds=300)

    assert get_lock_status(250, config) is LockStatus.EXPIRING


def test_update_recomputes_remaining_time_and_status():
    item = create_locked_product("p1", "Sneakers", 59.0, now=T0)

    updated = update_locked_product_timers([item], now=T0 + timedelta(minutes=14))

    assert len(updated) == 1
    assert updated[0].remaining_seconds == 60
    assert updated[0].status is LockStatus.EXPIRING
    # the input record is left untouched
    assert item.remaining_seconds == 900


def test_update_drops_expired_locks():
    early = create_locked_product("p1", "Sneakers", 59.0, now=T0)
    late = create_locked_product("p2", "Jacket", 80.0, now=T0 + timedelta(minutes=10))

    updated = update_locked_product_timers([early, late], now=T0 + timedelta(minutes=15))

    assert [item.product_id for item in updated] == ["p2"]
    assert updated[0].remaining_seconds == 600


def test_total_and_count():
    items = [
        create_locked_product("p1", "Sneakers", 59.5, now=T0),
        create_locked_product("s1", "Haircut", 20.0, category="service", now=T0),
    ]

    assert calculate_locked_total(items) == pytest.approx(79.5)
    assert get_locked_item_count(items) == 2
    assert calculate_locked_total([]) == 0
    assert get_locked_item_count([]) == 0


@pytest.mark.parametrize(
    "remaining, text",
    [
        (900, "15:00"),
        (61, "1:01"),
        (59.9, "0:59"),
        (0, "Expired"),
        (-1, "Expired"),
    ],
)
def test_format_remaining_time(remaining, text):
    assert format_remaining_time(remaining) == text
