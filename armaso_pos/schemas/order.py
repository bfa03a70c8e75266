"""Order schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from armaso_pos.models.menu import MenuCategory
from armaso_pos.models.order import OrderStatus, PaymentMethod


class OrderLineCreate(BaseModel):
    """A cart line. ``price`` is the unit price shown to the cashier."""

    menu_id: int
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0)


class OrderCreate(BaseModel):
    """Checkout request."""

    customer_name: str = Field(..., min_length=1, max_length=200)
    payment_method: PaymentMethod
    notes: Optional[str] = Field(default=None, max_length=1000)
    items: List[OrderLineCreate] = Field(..., min_length=1)
    discount: int = Field(default=0, ge=0)
    voucher_code: Optional[str] = Field(default=None, max_length=50)

    @field_validator("voucher_code")
    @classmethod
    def blank_code_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class BulkOrderStatusUpdate(BaseModel):
    order_ids: List[int] = Field(..., min_length=1)
    status: OrderStatus


class BulkOrderStatusResult(BaseModel):
    count: int


class OrderLineMenu(BaseModel):
    id: int
    name: str
    price: int
    category: MenuCategory

    model_config = {"from_attributes": True}


class OrderLineResponse(BaseModel):
    id: int
    menu_id: int
    quantity: int
    unit_price: int
    menu: OrderLineMenu

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Order response schema."""

    id: int
    customer_name: str
    subtotal: int
    discount: int
    total: int
    voucher_code: Optional[str] = None
    payment_method: PaymentMethod
    status: OrderStatus
    notes: Optional[str] = None
    created_at: datetime
    items: List[OrderLineResponse] = []

    model_config = {"from_attributes": True}
