"""Voucher routes."""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request, status

from armaso_pos.core.rate_limit import limiter
from armaso_pos.core.session import CurrentSession
from armaso_pos.db.session import DbSession
from armaso_pos.models.voucher import Voucher, VoucherLog
from armaso_pos.schemas.voucher import (
    ValidVoucher,
    VoucherApplyRequest,
    VoucherApplyResponse,
    VoucherCreate,
    VoucherLogOrder,
    VoucherLogResponse,
    VoucherLogVoucher,
    VoucherResponse,
    VoucherUpdate,
    VoucherValidateRequest,
    VoucherValidationResponse,
)
from armaso_pos.services import voucher_service
from armaso_pos.services.errors import OrderNotFoundError
from armaso_pos.services.voucher_service import (
    DuplicateVoucherCodeError,
    VoucherNotFoundError,
    VoucherRedemptionError,
    VoucherUsageLimitError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize_voucher(voucher: Voucher, log_count: int = 0) -> VoucherResponse:
    response = VoucherResponse.model_validate(voucher)
    response.log_count = log_count
    return response


def _serialize_log(log: VoucherLog) -> VoucherLogResponse:
    return VoucherLogResponse(
        id=log.id,
        voucher_id=log.voucher_id,
        order_id=log.order_id,
        code=log.code,
        discount=log.discount,
        applied_at=log.applied_at,
        voucher=VoucherLogVoucher(code=log.voucher.code, discount=log.voucher.discount) if log.voucher else None,
        order=VoucherLogOrder(
            id=log.order.id,
            customer_name=log.order.customer_name,
            total=log.order.total,
            created_at=log.order.created_at,
        ),
    )


@router.get("", response_model=List[VoucherResponse])
@limiter.limit("60/minute")
def get_vouchers(request: Request, db: DbSession, session: CurrentSession):
    """All vouchers, newest first, with how many times each was logged."""
    return [_serialize_voucher(v, count) for v, count in voucher_service.get_vouchers(db)]


@router.post("", response_model=VoucherResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_voucher(request: Request, data: VoucherCreate, db: DbSession, session: CurrentSession):
    try:
        voucher = voucher_service.create_voucher(
            db,
            code=data.code,
            discount=data.discount,
            max_usage=data.max_usage,
            expires_at=data.expires_at,
        )
    except DuplicateVoucherCodeError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _serialize_voucher(voucher)


@router.get("/logs", response_model=List[VoucherLogResponse])
@limiter.limit("60/minute")
def get_voucher_logs(request: Request, db: DbSession, session: CurrentSession):
    """The latest 100 redemptions, newest first."""
    return [_serialize_log(log) for log in voucher_service.get_voucher_logs(db)]


@router.post("/validate", response_model=VoucherValidationResponse)
@limiter.limit("60/minute")
def validate_voucher(request: Request, data: VoucherValidateRequest, db: DbSession, session: CurrentSession):
    """Tell the cashier whether a code can be used. Rejections are not errors."""
    result = voucher_service.validate_voucher(db, data.code)
    if not result.valid:
        return VoucherValidationResponse(
            valid=False, error=result.rejection.message, reason=result.rejection.value
        )
    voucher = result.voucher
    return VoucherValidationResponse(
        valid=True,
        voucher=ValidVoucher(id=voucher.id, code=voucher.code, discount=voucher.discount),
    )


@router.post("/apply", response_model=VoucherApplyResponse)
@limiter.limit("30/minute")
def apply_voucher(request: Request, data: VoucherApplyRequest, db: DbSession, session: CurrentSession):
    """Redeem a voucher for an order that has already been placed."""
    try:
        log = voucher_service.apply_voucher(db, data.voucher_code, data.order_id, data.discount)
    except VoucherNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Voucher not found")
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except VoucherRedemptionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.reason.message)
    return VoucherApplyResponse(success=True, log_id=log.id)


@router.put("/{voucher_id}", response_model=VoucherResponse)
@limiter.limit("30/minute")
def update_voucher(
    request: Request, voucher_id: int, data: VoucherUpdate, db: DbSession, session: CurrentSession
):
    try:
        voucher = voucher_service.update_voucher(
            db,
            voucher_id,
            code=data.code,
            discount=data.discount,
            is_active=data.is_active,
            max_usage=data.max_usage,
            expires_at=data.expires_at,
        )
    except VoucherNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Voucher not found")
    except (DuplicateVoucherCodeError, VoucherUsageLimitError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _serialize_voucher(voucher)


@router.delete("/{voucher_id}")
@limiter.limit("30/minute")
def delete_voucher(request: Request, voucher_id: int, db: DbSession, session: CurrentSession):
    try:
        voucher_service.delete_voucher(db, voucher_id)
    except VoucherNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Voucher not found")
    return {"success": True}
