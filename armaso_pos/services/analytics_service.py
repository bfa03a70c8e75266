"""Analytics Service - daily and weekly sales figures.

Nothing is cached or materialized: every call scans the orders in the
requested window. Day boundaries follow ``settings.timezone``.

Order revenue always uses the totals frozen on each order. Per-item revenue
uses ``settings.analytics_price_basis``: ``current`` multiplies by today's
menu price (so it moves when prices are edited), ``sale`` by the unit price
captured on the order line.
"""

import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from armaso_pos.core.config import settings
from armaso_pos.db.base import as_utc, utc_now
from armaso_pos.models.order import Order, OrderItem, OrderStatus
from armaso_pos.schemas.analytics import DailyStats, DayBucket, ItemSales, WeeklyStats

logger = logging.getLogger(__name__)

DAILY_TOP_ITEMS = 10
WEEKLY_TOP_ITEMS = 5
WEEK_DAYS = 7

# Statuses that count as a completed sale
REVENUE_STATUSES = (OrderStatus.PAID, OrderStatus.SERVED)

# Monday-first short weekday names per supported locale
WEEKDAY_NAMES = {
    "id": ("Sen", "Sel", "Rab", "Kam", "Jum", "Sab", "Min"),
    "en": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
}


def _local_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def _local_midnight(day: date, tz: ZoneInfo) -> datetime:
    """Start of ``day`` in the business timezone, expressed in UTC."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def day_label(day: date, locale: Optional[str] = None) -> str:
    names = WEEKDAY_NAMES[locale or settings.locale]
    return f"{names[day.weekday()]} {day.day}"


def _orders_between(db: Session, start: datetime, end: datetime) -> List[Order]:
    stmt = (
        select(Order)
        .options(selectinload(Order.items))
        .where(
            Order.created_at >= start,
            Order.created_at < end,
            Order.status.in_(REVENUE_STATUSES),
        )
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def _line_unit_price(line: OrderItem) -> int:
    basis = settings.analytics_price_basis
    if basis == "current":
        return line.menu.price
    if basis == "sale":
        return line.unit_price
    raise ValueError(f"Unknown analytics price basis: {basis!r}")


def aggregate_items(orders: Sequence[Order], top: int) -> List[ItemSales]:
    """Sum quantity and revenue per menu item, best sellers first.

    The sort is stable, so items sold in equal quantities keep the order in
    which they were first seen.
    """
    sales: "OrderedDict[int, Dict]" = OrderedDict()
    for order in orders:
        for line in order.items:
            entry = sales.setdefault(
                line.menu_id,
                {"menu_id": line.menu_id, "name": line.menu.name, "quantity": 0, "revenue": 0},
            )
            entry["quantity"] += line.quantity
            entry["revenue"] += line.quantity * _line_unit_price(line)

    ranked = sorted(sales.values(), key=lambda e: e["quantity"], reverse=True)
    return [ItemSales(**entry) for entry in ranked[:top]]


def _today_window(now: datetime, tz: ZoneInfo) -> Tuple[date, datetime, datetime]:
    today = as_utc(now).astimezone(tz).date()
    return today, _local_midnight(today, tz), _local_midnight(today + timedelta(days=1), tz)


def get_daily_stats(db: Session, now: Optional[datetime] = None) -> DailyStats:
    tz = _local_tz()
    _, start, end = _today_window(now or utc_now(), tz)
    orders = _orders_between(db, start, end)

    stats = DailyStats(
        total_revenue=sum(order.total for order in orders),
        total_orders=len(orders),
        popular_items=aggregate_items(orders, DAILY_TOP_ITEMS),
    )
    logger.debug(f"Daily stats: {stats.total_orders} orders, revenue {stats.total_revenue}")
    return stats


def get_weekly_stats(db: Session, now: Optional[datetime] = None) -> WeeklyStats:
    """The trailing seven days including today, one bucket per day."""
    tz = _local_tz()
    today, _, end = _today_window(now or utc_now(), tz)
    first_day = today - timedelta(days=WEEK_DAYS - 1)
    orders = _orders_between(db, _local_midnight(first_day, tz), end)

    buckets: "OrderedDict[date, Dict]" = OrderedDict(
        (day, {"orders": 0, "revenue": 0})
        for day in (first_day + timedelta(days=offset) for offset in range(WEEK_DAYS))
    )
    for order in orders:
        local_day = as_utc(order.created_at).astimezone(tz).date()
        bucket = buckets[local_day]
        bucket["orders"] += 1
        bucket["revenue"] += order.total

    return WeeklyStats(
        total_revenue=sum(order.total for order in orders),
        total_orders=len(orders),
        days=[
            DayBucket(date=day, label=day_label(day), orders=b["orders"], revenue=b["revenue"])
            for day, b in buckets.items()
        ],
        popular_items=aggregate_items(orders, WEEKLY_TOP_ITEMS),
    )
