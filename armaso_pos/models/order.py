"""Sales order models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SQLEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from armaso_pos.db.base import Base, TimestampMixin
from armaso_pos.models.validators import non_negative, positive


class PaymentMethod(str, Enum):
    """How the customer paid at checkout."""

    CASH = "CASH"
    QRIS = "QRIS"


class OrderStatus(str, Enum):
    """Fulfilment status of an order.

    PAID is the initial state, SERVED is terminal.
    """

    PAID = "PAID"
    SERVED = "SERVED"

    def can_transition_to(self, target: "OrderStatus") -> bool:
        """Return True if an order in this status may move to ``target``.

        Re-applying the current status is allowed so kitchen retries are
        idempotent.
        """
        if target is self:
            return True
        if self is OrderStatus.PAID:
            return target is OrderStatus.SERVED
        if self is OrderStatus.SERVED:
            return False
        raise ValueError(f"Unhandled order status: {self!r}")


class Order(Base, TimestampMixin):
    """A completed sale. Totals are frozen at checkout time."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    voucher_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(SQLEnum(PaymentMethod), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.PAID, nullable=False, index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @validates("subtotal", "discount", "total")
    def _validate_amounts(self, key, value):
        return non_negative(key, value)


class OrderItem(Base):
    """A line on an order. Immutable once the order is created."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # price the cashier charged for one unit
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    menu: Mapped["MenuItem"] = relationship("MenuItem", lazy="joined")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)

    @validates("unit_price")
    def _validate_unit_price(self, key, value):
        return non_negative(key, value)


# Forward references
from armaso_pos.models.menu import MenuItem  # noqa: E402
