"""Voucher schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _strip_code(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Voucher code cannot be blank")
    return v


class VoucherCreate(BaseModel):
    """Voucher creation schema. A missing or zero ``max_usage`` means unlimited."""

    code: str = Field(..., min_length=1, max_length=50)
    discount: int = Field(..., ge=0)
    max_usage: Optional[int] = Field(default=None, ge=0)
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def code_not_blank(cls, v: str) -> str:
        return _strip_code(v)


class VoucherUpdate(VoucherCreate):
    is_active: bool


class VoucherResponse(BaseModel):
    id: int
    code: str
    discount: int
    max_usage: Optional[int] = None
    usage_count: int
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    log_count: int = 0

    model_config = {"from_attributes": True}


class VoucherValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)

    @field_validator("code")
    @classmethod
    def code_not_blank(cls, v: str) -> str:
        return _strip_code(v)


class ValidVoucher(BaseModel):
    id: int
    code: str
    discount: int


class VoucherValidationResponse(BaseModel):
    """Validation outcome; rejections are reported here rather than raised."""

    valid: bool
    voucher: Optional[ValidVoucher] = None
    error: Optional[str] = None
    reason: Optional[str] = None


class VoucherApplyRequest(BaseModel):
    voucher_code: str = Field(..., min_length=1, max_length=50)
    order_id: int
    discount: int = Field(..., ge=0)

    @field_validator("voucher_code")
    @classmethod
    def code_not_blank(cls, v: str) -> str:
        return _strip_code(v)


class VoucherApplyResponse(BaseModel):
    success: bool
    log_id: int


class VoucherLogVoucher(BaseModel):
    code: str
    discount: int


class VoucherLogOrder(BaseModel):
    id: int
    customer_name: str
    total: int
    created_at: datetime


class VoucherLogResponse(BaseModel):
    id: int
    voucher_id: Optional[int] = None
    order_id: int
    code: str
    discount: int
    applied_at: datetime
    voucher: Optional[VoucherLogVoucher] = None
    order: VoucherLogOrder
