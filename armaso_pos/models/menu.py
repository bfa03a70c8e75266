"""Menu catalog models."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, Enum as SQLEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from armaso_pos.db.base import Base, TimestampMixin
from armaso_pos.models.validators import non_negative


class MenuCategory(str, Enum):
    """Category of a sellable item."""

    FOOD = "FOOD"
    DRINK = "DRINK"
    PACKAGE = "PACKAGE"


class MenuItem(Base, TimestampMixin):
    """A sellable item. Prices are integers in the minor currency unit."""

    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[MenuCategory] = mapped_column(SQLEnum(MenuCategory), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("price")
    def _validate_price(self, key, value):
        return non_negative(key, value)
