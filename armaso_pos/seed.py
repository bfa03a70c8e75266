"""Seed the database with the admin account and the starter menu.

Safe to run repeatedly: the admin user is only created when missing and
menu items are matched by category and name, refreshing their price.

Usage:
    python -m armaso_pos.seed
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from armaso_pos.core.security import get_password_hash
from armaso_pos.db.base import Base
from armaso_pos.db.session import SessionLocal, engine
from armaso_pos.models.menu import MenuCategory, MenuItem
from armaso_pos.models.user import User

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"

MENU_ITEMS = [
    ("Nasi Goreng Spesial", 25000, MenuCategory.FOOD),
    ("Mie Goreng", 22000, MenuCategory.FOOD),
    ("Ayam Bakar", 35000, MenuCategory.FOOD),
    ("Sate Ayam (10 tusuk)", 30000, MenuCategory.FOOD),
    ("Gado-gado", 20000, MenuCategory.FOOD),
    ("Rendang", 40000, MenuCategory.FOOD),
    ("Soto Ayam", 22000, MenuCategory.FOOD),
    ("Bakso Urat", 25000, MenuCategory.FOOD),

    ("Es Teh Manis", 5000, MenuCategory.DRINK),
    ("Es Jeruk", 8000, MenuCategory.DRINK),
    ("Kopi Susu", 15000, MenuCategory.DRINK),
    ("Jus Alpukat", 18000, MenuCategory.DRINK),
    ("Es Campur", 15000, MenuCategory.DRINK),
    ("Air Mineral", 4000, MenuCategory.DRINK),
    ("Teh Hangat", 4000, MenuCategory.DRINK),
    ("Lemon Tea", 10000, MenuCategory.DRINK),

    ("Paket Hemat A", 35000, MenuCategory.PACKAGE),
    ("Paket Hemat B", 40000, MenuCategory.PACKAGE),
    ("Paket Keluarga", 120000, MenuCategory.PACKAGE),
    ("Paket Nasi + Ayam + Es Teh", 45000, MenuCategory.PACKAGE),
    ("Paket Mie + Bakso + Jeruk", 42000, MenuCategory.PACKAGE),
]


def seed(db: Optional[Session] = None):
    """Insert the seed rows, committing once at the end."""
    owns_session = db is None
    if owns_session:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
    try:
        _seed_all(db)
        db.commit()
        print("Seed data committed successfully.")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        if owns_session:
            db.close()


def _seed_all(db: Session):
    admin = db.execute(select(User).where(User.username == ADMIN_USERNAME)).scalar_one_or_none()
    if admin is None:
        db.add(User(username=ADMIN_USERNAME, password_hash=get_password_hash(ADMIN_PASSWORD)))
        print(f"  + Admin user: {ADMIN_USERNAME}")

    created = 0
    for name, price, category in MENU_ITEMS:
        item = db.execute(
            select(MenuItem).where(MenuItem.name == name, MenuItem.category == category)
        ).scalar_one_or_none()
        if item is None:
            db.add(MenuItem(name=name, price=price, category=category))
            created += 1
        else:
            item.price = price
    db.flush()
    print(f"  + Menu items ({created} new, {len(MENU_ITEMS) - created} refreshed)")


if __name__ == "__main__":
    print("=" * 60)
    print("Armaso POS - Seed Data")
    print("=" * 60)
    seed()
