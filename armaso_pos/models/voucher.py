"""Voucher ledger models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from armaso_pos.db.base import Base, TimestampMixin, as_utc, utc_now
from armaso_pos.models.validators import non_negative, positive


def normalize_code(code: str) -> str:
    """Voucher codes are stored and looked up upper-cased."""
    return code.strip().upper()


class Voucher(Base, TimestampMixin):
    """A discount code with optional usage limit and expiry."""

    __tablename__ = "vouchers"
    # ids of deleted vouchers are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    discount: Mapped[int] = mapped_column(Integer, nullable=False)
    max_usage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("code")
    def _normalize_code(self, key, value):
        code = normalize_code(value)
        if not code:
            raise ValueError("code cannot be blank")
        return code

    @validates("discount", "usage_count")
    def _validate_amounts(self, key, value):
        return non_negative(key, value)

    @validates("max_usage")
    def _validate_max_usage(self, key, value):
        return positive(key, value)

    @validates("expires_at")
    def _normalize_expiry(self, key, value):
        return as_utc(value) if value is not None else None


class VoucherLog(Base):
    """One row per successful redemption. Never updated.

    ``voucher_id`` is set to NULL if the voucher is deleted; ``code`` keeps
    the log readable afterwards.
    """

    __tablename__ = "voucher_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    voucher_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("vouchers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    discount: Mapped[int] = mapped_column(Integer, nullable=False)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )

    voucher: Mapped[Optional["Voucher"]] = relationship("Voucher")
    order: Mapped["Order"] = relationship("Order")

    @validates("discount")
    def _validate_discount(self, key, value):
        return non_negative(key, value)


# Forward references
from armaso_pos.models.order import Order  # noqa: E402
