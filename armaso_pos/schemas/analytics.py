"""Sales analytics schemas."""

from __future__ import annotations

import datetime as dt
from typing import List

from pydantic import BaseModel


class ItemSales(BaseModel):
    menu_id: int
    name: str
    quantity: int
    revenue: int


class DailyStats(BaseModel):
    total_revenue: int
    total_orders: int
    popular_items: List[ItemSales]


class DayBucket(BaseModel):
    date: dt.date
    label: str
    orders: int
    revenue: int


class WeeklyStats(BaseModel):
    total_revenue: int
    total_orders: int
    days: List[DayBucket]
    popular_items: List[ItemSales]
