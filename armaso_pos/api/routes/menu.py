"""Menu catalog routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from sqlalchemy import select

from armaso_pos.core.rate_limit import limiter
from armaso_pos.core.session import CurrentSession
from armaso_pos.db.session import DbSession
from armaso_pos.models.menu import MenuCategory, MenuItem
from armaso_pos.models.order import OrderItem
from armaso_pos.schemas.menu import MenuActiveToggle, MenuItemCreate, MenuItemResponse, MenuItemUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_item_or_404(db, item_id: int) -> MenuItem:
    item = db.get(MenuItem, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    return item


@router.get("/items", response_model=List[MenuItemResponse])
@limiter.limit("60/minute")
def get_menu_items(
    request: Request,
    db: DbSession,
    session: CurrentSession,
    category: Optional[MenuCategory] = Query(None),
):
    """All menu items by name, optionally limited to one category."""
    stmt = select(MenuItem).order_by(MenuItem.name.asc())
    if category:
        stmt = stmt.where(MenuItem.category == category)
    return db.execute(stmt).scalars().all()


@router.get("/items/active", response_model=List[MenuItemResponse])
@limiter.limit("60/minute")
def get_active_menu_items(request: Request, db: DbSession, session: CurrentSession):
    """Items the cashier can sell."""
    stmt = select(MenuItem).where(MenuItem.is_active.is_(True)).order_by(MenuItem.name.asc())
    return db.execute(stmt).scalars().all()


@router.post("/items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_menu(request: Request, data: MenuItemCreate, db: DbSession, session: CurrentSession):
    item = MenuItem(name=data.name, price=data.price, category=data.category)
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info(f"Menu item created: {item.name} (ID: {item.id}) by {session.username}")
    return item


@router.put("/items/{item_id}", response_model=MenuItemResponse)
@limiter.limit("30/minute")
def update_menu(request: Request, item_id: int, data: MenuItemUpdate, db: DbSession, session: CurrentSession):
    """Edit a menu item. Orders already placed keep their recorded totals."""
    item = _get_item_or_404(db, item_id)
    item.name = data.name
    item.price = data.price
    item.category = data.category
    db.commit()
    db.refresh(item)
    logger.info(f"Menu item updated: {item.name} (ID: {item.id}) by {session.username}")
    return item


@router.delete("/items/{item_id}")
@limiter.limit("30/minute")
def delete_menu(request: Request, item_id: int, db: DbSession, session: CurrentSession):
    """Delete a menu item that has never been sold."""
    item = _get_item_or_404(db, item_id)
    sold = db.execute(
        select(OrderItem.id).where(OrderItem.menu_id == item_id).limit(1)
    ).first()
    if sold:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Menu item appears on existing orders; deactivate it instead",
        )
    db.delete(item)
    db.commit()
    logger.info(f"Menu item deleted: ID {item_id} by {session.username}")
    return {"success": True}


@router.patch("/items/{item_id}/active", response_model=MenuItemResponse)
@limiter.limit("30/minute")
def toggle_menu_active(
    request: Request, item_id: int, data: MenuActiveToggle, db: DbSession, session: CurrentSession
):
    item = _get_item_or_404(db, item_id)
    item.is_active = data.is_active
    db.commit()
    db.refresh(item)
    return item
