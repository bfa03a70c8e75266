"""Pytest configuration and fixtures."""

import os

# Settings are read once on import; point them at a throwaway database first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("DEBUG", "true")

from datetime import datetime
from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from armaso_pos.core.config import settings
from armaso_pos.core.rate_limit import limiter
from armaso_pos.core.security import create_session_token, get_password_hash
from armaso_pos.db.base import Base
from armaso_pos.db.session import get_db
from armaso_pos.main import app
# Import all models to ensure they're registered with Base.metadata
from armaso_pos.models import *  # noqa: F401,F403
from armaso_pos.models.menu import MenuCategory, MenuItem
from armaso_pos.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from armaso_pos.models.user import User
from armaso_pos.models.voucher import Voucher

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable rate limiting during tests to avoid flaky failures
    limiter.enabled = False
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session: Session) -> User:
    """Create a test user."""
    user = User(
        username="kasir",
        password_hash=get_password_hash("testpass123"),
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def session_token(test_user: User) -> str:
    return create_session_token(test_user.id, test_user.username)


@pytest.fixture
def auth_client(client: TestClient, session_token: str) -> TestClient:
    """A client carrying a valid session cookie."""
    client.cookies.set(settings.session_cookie_name, session_token)
    return client


@pytest.fixture
def menu_items(db_session: Session) -> dict:
    """A small menu: two foods, a drink and a retired package."""
    items = {
        "nasi": MenuItem(name="Nasi Goreng Spesial", price=25000, category=MenuCategory.FOOD),
        "sate": MenuItem(name="Sate Ayam", price=30000, category=MenuCategory.FOOD),
        "teh": MenuItem(name="Es Teh Manis", price=5000, category=MenuCategory.DRINK),
        "paket": MenuItem(
            name="Paket Hemat A", price=35000, category=MenuCategory.PACKAGE, is_active=False
        ),
    }
    db_session.add_all(items.values())
    db_session.commit()
    for item in items.values():
        db_session.refresh(item)
    return items


@pytest.fixture
def make_voucher(db_session: Session):
    """Factory for vouchers stored directly in the database."""
    def _make(
        code: str = "HEMAT10",
        discount: int = 10000,
        max_usage: Optional[int] = None,
        usage_count: int = 0,
        expires_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> Voucher:
        voucher = Voucher(
            code=code,
            discount=discount,
            max_usage=max_usage,
            usage_count=usage_count,
            expires_at=expires_at,
            is_active=is_active,
        )
        db_session.add(voucher)
        db_session.commit()
        db_session.refresh(voucher)
        return voucher

    return _make


@pytest.fixture
def make_order(db_session: Session):
    """Factory for orders inserted without going through checkout.

    ``lines`` is a list of (menu_item, quantity) pairs charged at the item's
    current price.
    """
    def _make(
        lines: List[tuple],
        customer_name: str = "Budi",
        discount: int = 0,
        status: OrderStatus = OrderStatus.PAID,
        created_at: Optional[datetime] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
    ) -> Order:
        subtotal = sum(item.price * qty for item, qty in lines)
        order = Order(
            customer_name=customer_name,
            payment_method=payment_method,
            status=status,
            subtotal=subtotal,
            discount=discount,
            total=max(0, subtotal - discount),
            items=[
                OrderItem(menu_id=item.id, quantity=qty, unit_price=item.price)
                for item, qty in lines
            ],
        )
        if created_at is not None:
            order.created_at = created_at
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make
