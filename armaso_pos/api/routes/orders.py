"""Sales order and kitchen queue routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from armaso_pos.core.rate_limit import limiter
from armaso_pos.core.session import CurrentSession
from armaso_pos.db.session import DbSession
from armaso_pos.models.order import OrderStatus
from armaso_pos.schemas.order import (
    BulkOrderStatusResult,
    BulkOrderStatusUpdate,
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
)
from armaso_pos.services import order_service
from armaso_pos.services.order_service import (
    InvalidStatusTransitionError,
    OrderLine,
    OrderNotFoundError,
    OrderValidationError,
)
from armaso_pos.services.voucher_service import VoucherNotFoundError, VoucherRedemptionError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
def create_order(request: Request, data: OrderCreate, db: DbSession, session: CurrentSession):
    """Checkout: record a paid order, redeeming its voucher if one is given."""
    try:
        return order_service.place_order(
            db,
            customer_name=data.customer_name,
            payment_method=data.payment_method,
            items=[OrderLine(menu_id=i.menu_id, quantity=i.quantity, price=i.price) for i in data.items],
            notes=data.notes,
            discount=data.discount,
            voucher_code=data.voucher_code,
        )
    except OrderValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except VoucherNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except VoucherRedemptionError as e:
        logger.warning(f"Checkout rejected by {session.username}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.reason.message)


@router.get("", response_model=List[OrderResponse])
@limiter.limit("60/minute")
def get_orders(
    request: Request,
    db: DbSession,
    session: CurrentSession,
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=200),
    limit: Optional[int] = Query(None, ge=1, le=500),
):
    """Order history, newest first."""
    return order_service.get_orders(db, status=status_filter, search=search, limit=limit)


@router.get("/kitchen", response_model=List[OrderResponse])
@limiter.limit("120/minute")
def get_kitchen_orders(request: Request, db: DbSession, session: CurrentSession):
    """Orders still to be served, oldest first. Polled by the kitchen display."""
    return order_service.get_kitchen_orders(db)


@router.patch("/status", response_model=BulkOrderStatusResult)
@limiter.limit("60/minute")
def update_multiple_order_status(
    request: Request, data: BulkOrderStatusUpdate, db: DbSession, session: CurrentSession
):
    try:
        count = order_service.update_multiple_order_status(db, data.order_ids, data.status)
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return BulkOrderStatusResult(count=count)


@router.get("/{order_id}", response_model=OrderResponse)
@limiter.limit("60/minute")
def get_order(request: Request, order_id: int, db: DbSession, session: CurrentSession):
    try:
        return order_service.get_order(db, order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


@router.patch("/{order_id}/status", response_model=OrderResponse)
@limiter.limit("60/minute")
def update_order_status(
    request: Request, order_id: int, data: OrderStatusUpdate, db: DbSession, session: CurrentSession
):
    try:
        return order_service.update_order_status(db, order_id, data.status)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
