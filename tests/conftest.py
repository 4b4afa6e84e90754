import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models.products import Product
from app.models.sales import Sale  # noqa: F401
from app.models.sale_items import SaleItem  # noqa: F401
from app.services.dashboard import sessions

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def other_db(db):
    # A second session against the same database, like a concurrent request
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    sessions.clear()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    sessions.clear()


@pytest.fixture
def make_product(db):
    def _make(name="Keto Molde", price="6900", cost="4050", stock=20):
        product = Product(
            name=name,
            price=Decimal(price),
            cost=Decimal(cost),
            stock=stock,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def catalogue(make_product):
    molde = make_product("Keto Molde")
    redondito = make_product("Keto Redondito")
    return molde, redondito
