"""Order Service - checkout, order queries and kitchen status updates.

Checkout flow:
1. Compute subtotal from the cart's unit prices (the cashier's snapshot,
   not a fresh catalog read)
2. Resolve the discount: the voucher's discount when a code is given,
   otherwise the manual discount
3. Insert the order and its lines with status PAID
4. Redeem the voucher in the same transaction
5. Commit, or roll back every write if any step fails
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from armaso_pos.models.menu import MenuItem
from armaso_pos.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from armaso_pos.services import voucher_service
from armaso_pos.services.errors import OrderNotFoundError
from armaso_pos.services.voucher_service import VoucherRedemptionError, VoucherRejection

logger = logging.getLogger(__name__)


class OrderValidationError(Exception):
    """Raised when a checkout request references unknown data."""


class InvalidStatusTransitionError(Exception):
    """Raised when an order would move backwards in its lifecycle."""

    def __init__(self, order_id: int, current: OrderStatus, target: OrderStatus):
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(
            f"Order {order_id} cannot change from {current.value} to {target.value}"
        )


@dataclass
class OrderLine:
    """One cart line as submitted at checkout."""

    menu_id: int
    quantity: int
    price: int


def compute_subtotal(lines: Iterable[OrderLine]) -> int:
    return sum(line.price * line.quantity for line in lines)


def compute_total(subtotal: int, discount: int) -> int:
    """Discounts never push a total below zero."""
    return max(0, subtotal - discount)


def _order_query():
    return select(Order).options(selectinload(Order.items))


def place_order(
    db: Session,
    customer_name: str,
    payment_method: PaymentMethod,
    items: Sequence[OrderLine],
    notes: Optional[str] = None,
    discount: int = 0,
    voucher_code: Optional[str] = None,
) -> Order:
    """Record a paid order, redeeming ``voucher_code`` atomically with it."""
    if not items:
        raise OrderValidationError("Order must contain at least one item")

    menu_ids = {line.menu_id for line in items}
    known_ids = set(db.execute(select(MenuItem.id).where(MenuItem.id.in_(menu_ids))).scalars())
    missing = sorted(menu_ids - known_ids)
    if missing:
        raise OrderValidationError(f"Menu items not found: {missing}")

    voucher = None
    if voucher_code:
        voucher = voucher_service.find_voucher(db, voucher_code)
        if voucher is None:
            raise VoucherRedemptionError(voucher_code.strip().upper(), VoucherRejection.NOT_FOUND)
        discount = voucher.discount

    subtotal = compute_subtotal(items)
    order = Order(
        customer_name=customer_name.strip(),
        payment_method=payment_method,
        status=OrderStatus.PAID,
        notes=notes,
        subtotal=subtotal,
        discount=discount,
        total=compute_total(subtotal, discount),
        voucher_code=voucher.code if voucher else None,
        items=[
            OrderItem(menu_id=line.menu_id, quantity=line.quantity, unit_price=line.price)
            for line in items
        ],
    )

    try:
        db.add(order)
        db.flush()
        if voucher is not None:
            voucher_service.redeem_voucher(db, voucher.code, order.id, discount=discount)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Order {order.id} placed for '{order.customer_name}': subtotal={subtotal} "
        f"discount={discount} total={order.total} via {payment_method.value}"
    )
    return get_order(db, order.id)


def get_order(db: Session, order_id: int) -> Order:
    order = db.execute(_order_query().where(Order.id == order_id)).scalar_one_or_none()
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def get_orders(
    db: Session,
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Order]:
    """Orders newest first, filtered by status and customer name."""
    stmt = _order_query()
    if status is not None:
        stmt = stmt.where(Order.status == status)
    if search:
        stmt = stmt.where(func.lower(Order.customer_name).contains(search.lower(), autoescape=True))
    stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc())
    if limit:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def get_kitchen_orders(db: Session) -> List[Order]:
    """Paid orders waiting to be served, earliest first."""
    stmt = (
        _order_query()
        .where(Order.status == OrderStatus.PAID)
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def update_order_status(db: Session, order_id: int, status: OrderStatus) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    if not order.status.can_transition_to(status):
        raise InvalidStatusTransitionError(order_id, order.status, status)

    order.status = status
    db.commit()
    logger.info(f"Order {order_id} marked {status.value}")
    return get_order(db, order_id)


def update_multiple_order_status(db: Session, order_ids: Sequence[int], status: OrderStatus) -> int:
    """Move several orders at once. Unknown ids are skipped.

    All-or-nothing: if any existing order cannot make the transition,
    nothing is changed. Returns the number of orders matched.
    """
    orders = db.execute(select(Order).where(Order.id.in_(set(order_ids)))).scalars().all()
    for order in orders:
        if not order.status.can_transition_to(status):
            raise InvalidStatusTransitionError(order.id, order.status, status)

    for order in orders:
        order.status = status
    db.commit()
    logger.info(f"{len(orders)} orders marked {status.value}")
    return len(orders)
