"""Menu catalog schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from armaso_pos.models.menu import MenuCategory


class MenuItemCreate(BaseModel):
    """Menu item creation schema."""

    name: str = Field(..., min_length=1, max_length=200)
    price: int = Field(..., ge=0)
    category: MenuCategory


class MenuItemUpdate(MenuItemCreate):
    """Full replacement of a menu item's editable fields."""


class MenuActiveToggle(BaseModel):
    is_active: bool


class MenuItemResponse(BaseModel):
    """Menu item response schema."""

    id: int
    name: str
    price: int
    category: MenuCategory
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
