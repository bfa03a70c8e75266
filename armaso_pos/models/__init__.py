"""SQLAlchemy models."""

from armaso_pos.models.user import User
from armaso_pos.models.menu import MenuCategory, MenuItem
from armaso_pos.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from armaso_pos.models.voucher import Voucher, VoucherLog

__all__ = [
    "User",
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "Voucher",
    "VoucherLog",
]
