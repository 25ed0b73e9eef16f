"""
Pytest configuration and fixtures for the cart service tests.
"""

import os

# musi byc ustawione przed importem storefront (engine i create_all przy imporcie)
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_lock_service
from storefront.data.database import Base, get_db
from storefront.data.models import CartLineModel, ProductModel, UserModel
from storefront.domain.errors import ConflictOnWrite
from storefront.main import app
from storefront.services.cart_service import CartService
from storefront.services.session_service import issue_session_token


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class InMemoryLockService:
    """Per-product lock held in a set instead of Redis."""

    def __init__(self):
        self.held = set()
        self.acquired = []

    @contextmanager
    def product_lock(self, product_id):
        if product_id in self.held:
            raise ConflictOnWrite("Product is being reserved by another request, please retry")
        self.held.add(product_id)
        self.acquired.append(product_id)
        try:
            yield "test-token"
        finally:
            self.held.discard(product_id)


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def lock_service():
    return InMemoryLockService()


@pytest.fixture
def cart_service(db_session, lock_service):
    return CartService(db=db_session, lock_service=lock_service)


@pytest.fixture
def users(db_session):
    alice = UserModel(id="user-a", name="Alice", email="alice@test.com")
    bob = UserModel(id="user-b", name="Bob", email="bob@test.com")
    db_session.add_all([alice, bob])
    db_session.commit()
    return alice, bob


@pytest.fixture
def product(db_session):
    """T-shirt with stock 10 in S/M/L."""
    p = ProductModel(
        id="tee",
        name="Classic Tee",
        price=Decimal("100.00"),
        stock=10,
        sizes=["S", "M", "L"],
        image_urls=["/img/tee.jpg"],
    )
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture
def add_line(db_session):
    """Insert a cart line directly, optionally backdated."""

    def _add(user_id, product_id, quantity, variant="", age=timedelta(0)):
        line = CartLineModel(
            user_id=user_id,
            product_id=product_id,
            size_variant=variant,
            quantity=quantity,
            added_at=datetime.now(timezone.utc) - age,
        )
        db_session.add(line)
        db_session.commit()
        return line

    return _add


@pytest.fixture
def lines_of(db_session):
    def _lines(user_id, product_id=None):
        db_session.expire_all()
        q = db_session.query(CartLineModel).filter(CartLineModel.user_id == user_id)
        if product_id is not None:
            q = q.filter(CartLineModel.product_id == product_id)
        return q.order_by(CartLineModel.id).all()

    return _lines


@pytest.fixture(scope="function")
def client(db_session, lock_service):
    """
    Test client with database session and lock service overridden.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id="user-a"):
        return {"Authorization": f"Bearer {issue_session_token(user_id)}"}

    return _headers
