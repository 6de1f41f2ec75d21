"""Pytest configuration for tests.

The app reads its settings at import time, so the environment is pinned to an
in-memory SQLite database and a throwaway media directory before anything from
``vintage_beauty`` is imported.
"""

import os
import shutil
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = "owner@vintagebeauty.test"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="vintage-beauty-media-")

import pytest
from fastapi.testclient import TestClient

from vintage_beauty.main import app, create_tables
from vintage_beauty.models.category import Category
from vintage_beauty.models.user import Base, SessionLocal, User, engine
from vintage_beauty.schemas.product import ProductCreate
from vintage_beauty.services.pricing import slugify
from vintage_beauty.services.products import save_product

ADMIN = ("admin@vintagebeauty.test", "s3cret")
CUSTOMER = ("customer@vintagebeauty.test", "hunter2")


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(os.environ["MEDIA_ROOT"], ignore_errors=True)


@pytest.fixture
def db():
    """Fresh schema per test."""
    create_tables()
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def admin_auth(db):
    db.add(User(email=ADMIN[0], password=ADMIN[1], role="ADMIN"))
    db.commit()
    return ADMIN


@pytest.fixture
def customer_auth(db):
    db.add(User(email=CUSTOMER[0], password=CUSTOMER[1], role="USER"))
    db.commit()
    return CUSTOMER


@pytest.fixture
def make_category(db):
    def _make(name: str, description: str = None) -> Category:
        category = Category(name=name, slug=slugify(name), description=description)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture
def perfumes(make_category):
    return make_category("Perfumes")


@pytest.fixture
def gift_sets(make_category):
    return make_category("Gift Sets")


@pytest.fixture
def make_product(db):
    """Create a product through the real write path."""

    def _make(category: Category, **fields):
        data = {
            "name": "Rose Oud",
            "description": "Rose over a dark oud base.",
            "category_id": category.id,
            "images": ["https://cdn.vintagebeauty.test/rose-oud.jpg"],
            "stock": 5,
        }
        data.update(fields)
        return save_product(db, ProductCreate(**data))

    return _make
