"""Pytest fixtures for storefront tests."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")

from decimal import Decimal

import pytest
from sqlmodel import Session

from storefront.config import settings
from storefront.database import build_engine, create_db_and_tables
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services import cart_service
from storefront.services.inventory_service import current_stock

ADDRESS = {
    "full_name": "Ada Lovelace",
    "address": "12 Analytical Row",
    "city": "London",
    "postal_code": "N1 9GU",
    "country": "UK",
    "phone": "+441234567890",
}


@pytest.fixture
def engine(tmp_path):
    """File backed SQLite so several threads see the same data."""
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "stock_retry_backoff_seconds", 0)


def _user(session, email, role="user"):
    user = User(first_name="Test", last_name=email.split("@")[0], email=email, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    return _user(session, "customer@example.com")


@pytest.fixture
def other_customer(session):
    return _user(session, "other@example.com")


@pytest.fixture
def admin(session):
    return _user(session, "admin@example.com", role="admin")


@pytest.fixture
def make_product(session):
    def factory(title="Widget", price="10.00", stock=10):
        product = Product(title=title, price=Decimal(price), stock=stock)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return factory


@pytest.fixture
def fill_cart(session):
    def fill(user, *lines):
        for product, quantity in lines:
            cart_service.add_to_cart(session, user.id, product.id, quantity)
        return cart_service.get_cart(session, user.id)

    return fill


@pytest.fixture
def stock_of(session):
    def read(product):
        return current_stock(session, product.id)

    return read


@pytest.fixture
def address():
    return dict(ADDRESS)
