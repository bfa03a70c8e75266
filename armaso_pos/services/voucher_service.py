"""Voucher Service - validation, redemption and administration of discount codes.

Redemption flow:
1. Look up the voucher by its normalized code
2. Insert the VoucherLog row for the order
3. Increment usage_count with a single conditional UPDATE that re-checks
   active, expiry and the usage limit inside the same transaction
4. Zero affected rows means another checkout won the last use (or the
   voucher changed since validation): the caller rolls everything back

Validation (``validate_voucher``) is advisory for the cashier UI; only the
conditional update decides whether a redemption succeeds, so two checkouts
that both validated a voucher with one use left cannot both redeem it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from armaso_pos.db.base import as_utc, utc_now
from armaso_pos.models.order import Order
from armaso_pos.models.voucher import Voucher, VoucherLog, normalize_code
from armaso_pos.services.errors import OrderNotFoundError

logger = logging.getLogger(__name__)

VOUCHER_LOG_LIMIT = 100


class VoucherRejection(str, Enum):
    """Why a voucher cannot be used. Checked in declaration order."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    USAGE_LIMIT_REACHED = "usage_limit_reached"

    @property
    def message(self) -> str:
        if self is VoucherRejection.NOT_FOUND:
            return "Voucher code not found"
        if self is VoucherRejection.INACTIVE:
            return "Voucher is inactive"
        if self is VoucherRejection.EXPIRED:
            return "Voucher has expired"
        if self is VoucherRejection.USAGE_LIMIT_REACHED:
            return "Voucher usage limit reached"
        raise ValueError(f"Unhandled voucher rejection: {self!r}")


class VoucherNotFoundError(Exception):
    """Raised when a voucher id or code does not exist."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"Voucher {identifier} not found")


class VoucherRedemptionError(Exception):
    """Raised when a voucher cannot be redeemed for an order."""

    def __init__(self, code: str, reason: VoucherRejection):
        self.code = code
        self.reason = reason
        super().__init__(f"Voucher '{code}' cannot be redeemed: {reason.message}")


class DuplicateVoucherCodeError(Exception):
    """Raised when a voucher code is already taken."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Voucher code '{code}' already exists")


class VoucherUsageLimitError(Exception):
    """Raised when a new usage limit is below the uses already taken."""

    def __init__(self, code: str, max_usage: int, usage_count: int):
        self.code = code
        self.max_usage = max_usage
        self.usage_count = usage_count
        super().__init__(
            f"Voucher '{code}' has already been used {usage_count} times; "
            f"max_usage cannot be set to {max_usage}"
        )


@dataclass
class VoucherValidation:
    valid: bool
    voucher: Optional[Voucher] = None
    rejection: Optional[VoucherRejection] = None


def find_voucher(db: Session, code: str) -> Optional[Voucher]:
    return db.execute(
        select(Voucher).where(Voucher.code == normalize_code(code))
    ).scalar_one_or_none()


def check_voucher(voucher: Optional[Voucher], now: Optional[datetime] = None) -> Optional[VoucherRejection]:
    """Return the first rule the voucher fails, or None if it is usable."""
    now = as_utc(now) if now else utc_now()
    if voucher is None:
        return VoucherRejection.NOT_FOUND
    if not voucher.is_active:
        return VoucherRejection.INACTIVE
    if voucher.expires_at is not None and now > as_utc(voucher.expires_at):
        return VoucherRejection.EXPIRED
    if voucher.max_usage and voucher.usage_count >= voucher.max_usage:
        return VoucherRejection.USAGE_LIMIT_REACHED
    return None


def validate_voucher(db: Session, code: str, now: Optional[datetime] = None) -> VoucherValidation:
    """Check whether ``code`` could be redeemed right now."""
    voucher = find_voucher(db, code)
    rejection = check_voucher(voucher, now)
    if rejection is not None:
        logger.info(f"Voucher '{normalize_code(code)}' rejected: {rejection.value}")
        return VoucherValidation(valid=False, rejection=rejection)
    return VoucherValidation(valid=True, voucher=voucher)


def _increment_usage(db: Session, voucher_id: int, now: datetime) -> int:
    """Take one use of the voucher if it is still redeemable.

    Returns the number of rows updated (0 or 1).
    """
    stmt = (
        update(Voucher)
        .where(
            Voucher.id == voucher_id,
            Voucher.is_active.is_(True),
            or_(Voucher.expires_at.is_(None), Voucher.expires_at >= now),
            or_(Voucher.max_usage.is_(None), Voucher.usage_count < Voucher.max_usage),
        )
        .values(usage_count=Voucher.usage_count + 1)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount


def redeem_voucher(
    db: Session,
    code: str,
    order_id: int,
    discount: Optional[int] = None,
    now: Optional[datetime] = None,
) -> VoucherLog:
    """Record a redemption and take one use of the voucher.

    Does not commit: the caller owns the transaction and must roll back if
    this raises, which discards the log row together with the increment.
    ``discount`` defaults to the voucher's current discount.
    """
    now = as_utc(now) if now else utc_now()
    voucher = find_voucher(db, code)
    if voucher is None:
        raise VoucherNotFoundError(normalize_code(code))

    log = VoucherLog(
        voucher_id=voucher.id,
        order_id=order_id,
        code=voucher.code,
        discount=voucher.discount if discount is None else discount,
        applied_at=now,
    )
    db.add(log)
    db.flush()

    if _increment_usage(db, voucher.id, now) == 0:
        db.refresh(voucher)
        reason = check_voucher(voucher, now) or VoucherRejection.USAGE_LIMIT_REACHED
        raise VoucherRedemptionError(voucher.code, reason)

    db.expire(voucher, ["usage_count"])
    logger.info(f"Voucher '{voucher.code}' redeemed for order {order_id} (discount {log.discount})")
    return log


def apply_voucher(db: Session, code: str, order_id: int, discount: int) -> VoucherLog:
    """Redeem a voucher against an existing order and commit."""
    if db.get(Order, order_id) is None:
        raise OrderNotFoundError(order_id)
    try:
        log = redeem_voucher(db, code, order_id, discount=discount)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(log)
    return log


# ==================== ADMINISTRATION ====================

def get_vouchers(db: Session) -> List[Tuple[Voucher, int]]:
    """All vouchers, newest first, each with its number of usage log rows."""
    log_counts = (
        select(VoucherLog.voucher_id, func.count(VoucherLog.id).label("log_count"))
        .group_by(VoucherLog.voucher_id)
        .subquery()
    )
    stmt = (
        select(Voucher, func.coalesce(log_counts.c.log_count, 0))
        .outerjoin(log_counts, log_counts.c.voucher_id == Voucher.id)
        .order_by(Voucher.created_at.desc(), Voucher.id.desc())
    )
    try:
        return [(voucher, count) for voucher, count in db.execute(stmt).all()]
    except Exception:
        logger.exception("Error fetching vouchers")
        raise


def _get_voucher_or_raise(db: Session, voucher_id: int) -> Voucher:
    voucher = db.get(Voucher, voucher_id)
    if voucher is None:
        raise VoucherNotFoundError(voucher_id)
    return voucher


def _commit_code_change(db: Session, voucher: Voucher) -> Voucher:
    code = voucher.code
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateVoucherCodeError(code)
    db.refresh(voucher)
    return voucher


def create_voucher(
    db: Session,
    code: str,
    discount: int,
    max_usage: Optional[int] = None,
    expires_at: Optional[datetime] = None,
) -> Voucher:
    voucher = Voucher(
        code=code,
        discount=discount,
        max_usage=max_usage or None,
        expires_at=expires_at,
    )
    db.add(voucher)
    voucher = _commit_code_change(db, voucher)
    logger.info(f"Voucher created: {voucher.code} (ID: {voucher.id})")
    return voucher


def update_voucher(
    db: Session,
    voucher_id: int,
    code: str,
    discount: int,
    is_active: bool,
    max_usage: Optional[int] = None,
    expires_at: Optional[datetime] = None,
) -> Voucher:
    """Replace a voucher's editable fields.

    ``usage_count`` is never edited here, and a usage limit below it is
    rejected with ``VoucherUsageLimitError``.
    """
    voucher = _get_voucher_or_raise(db, voucher_id)
    if max_usage and max_usage < voucher.usage_count:
        raise VoucherUsageLimitError(voucher.code, max_usage, voucher.usage_count)
    voucher.code = code
    voucher.discount = discount
    voucher.is_active = is_active
    voucher.max_usage = max_usage or None
    voucher.expires_at = expires_at
    voucher = _commit_code_change(db, voucher)
    logger.info(f"Voucher updated: {voucher.code} (ID: {voucher.id})")
    return voucher


def delete_voucher(db: Session, voucher_id: int) -> None:
    """Delete a voucher. Its usage logs stay, detached from the voucher."""
    voucher = _get_voucher_or_raise(db, voucher_id)
    db.delete(voucher)
    db.commit()
    logger.info(f"Voucher deleted: {voucher.code} (ID: {voucher_id})")


def get_voucher_logs(db: Session, limit: int = VOUCHER_LOG_LIMIT) -> List[VoucherLog]:
    stmt = (
        select(VoucherLog)
        .options(joinedload(VoucherLog.voucher), joinedload(VoucherLog.order))
        .order_by(VoucherLog.applied_at.desc(), VoucherLog.id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())
