import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database.connection import Base, configure_sqlite
from app.models import cart, commission, order, product, user  # noqa: F401
from app.models.product import PricingTier, Product
from app.services.user_service import create_user

TEST_DB_URL = "sqlite:///:memory:"

engine = configure_sqlite(
    create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    # services commit for real, so every test gets a fresh schema
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def product_factory(db):
    def _create(base_price="120.00", stock=10, tiers=(), is_active=True, name="Test Product"):
        product = Product(
            name=name,
            base_price=Decimal(str(base_price)),
            stock_quantity=stock,
            is_active=is_active,
        )
        product.pricing_tiers = [
            PricingTier(min_quantity=lo, max_quantity=hi, unit_price=Decimal(str(price)))
            for lo, hi, price in tiers
        ]
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _create


@pytest.fixture()
def tiered_product(product_factory):
    """Tiers (1-3, 100), (4-11, 90), (12+, 80), base price 120, stock 10."""
    return product_factory(
        base_price="120.00",
        stock=10,
        tiers=[(1, 3, "100.00"), (4, 11, "90.00"), (12, None, "80.00")],
    )


@pytest.fixture()
def user_factory(db):
    counter = {"n": 0}

    def _create(role="customer", sales_agent_id=None):
        counter["n"] += 1
        return create_user(
            db,
            username=f"{role}_{counter['n']}",
            password="secret",
            email=f"{role}_{counter['n']}@example.com",
            role=role,
            sales_agent_id=sales_agent_id,
        )

    return _create


@pytest.fixture()
def customer(user_factory):
    return user_factory()


@pytest.fixture()
def sales_agent(user_factory):
    return user_factory(role="sales_agent")


@pytest.fixture()
def referred_customer(user_factory, sales_agent):
    return user_factory(sales_agent_id=sales_agent.id)


@pytest.fixture()
def admin(user_factory):
    return user_factory(role="admin")
