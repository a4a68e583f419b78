import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "1")

from contextlib import asynccontextmanager
from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_notifier, get_session_store
from storefront.data.database import get_db, init_db
from storefront.data.models import DeliverySlotModel, ProductModel, UserModel
from storefront.domain.cart import CartOwner
from storefront.main import create_app
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from tests.fakes import FakeNotifier, FakeSessionStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def session_store():
    return FakeSessionStore()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(session_factory, session_store, notifier):
    @asynccontextmanager
    async def no_lifespan(app):
        yield

    app = create_app(lifespan=no_lifespan)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(user_id: int = 1, name: str = "Alice") -> UserModel:
        user = UserModel(id=user_id, name=name)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(
        name: str = "Widget",
        price: str = "10.00",
        stock: int | None = 10,
        active: bool = True,
    ) -> ProductModel:
        product = ProductModel(name=name, price=Decimal(price), stock_quantity=stock, is_active=active)
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_slot(db):
    def _make(
        days_ahead: int = 5,
        capacity: int = 10,
        consumed: int = 0,
        price: str = "2.95",
        start: str = "08:00",
        end: str = "10:00",
    ) -> DeliverySlotModel:
        slot = DeliverySlotModel(
            date=date.today() + timedelta(days=days_ahead),
            start_time=start,
            end_time=end,
            price=Decimal(price),
            total_capacity=capacity,
            consumed_capacity=consumed,
        )
        db.add(slot)
        db.commit()
        return slot

    return _make


@pytest.fixture
def place_order(db, session_store, notifier):
    """Fill the user's cart and check it out through the real services."""

    def _place(user_id: int, lines, slot, payment_method: str = "card"):
        owner = CartOwner(session_id=f"sess-{user_id}", user_id=user_id)
        cart = CartService(db, session_store)
        for product, quantity in lines:
            cart.add(owner, product.id, quantity)
        return CheckoutService(db, session_store, notifier).place_order(owner, slot.id, payment_method)

    return _place
