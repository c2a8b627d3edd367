"""
Concurrent placements against a file-backed database, each thread with its
own session and connection, the way request workers run in production.
"""

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import InsufficientStock
from app.database.connection import Base, create_database_engine
from app.models.order import Order
from app.models.product import PricingTier, Product
from app.models.user import User
from app.services.order_service import RequestedItem, place_order


@pytest.fixture()
def file_sessionmaker(tmp_path):
    engine = create_database_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _seed(SessionFactory, stock, customers):
    with SessionFactory() as session:
        product = Product(name="Contended", base_price=Decimal("120.00"), stock_quantity=stock)
        product.pricing_tiers = [
            PricingTier(min_quantity=1, max_quantity=3, unit_price=Decimal("100.00")),
            PricingTier(min_quantity=4, max_quantity=11, unit_price=Decimal("90.00")),
        ]
        users = [
            User(username=f"buyer_{i}", hashed_password="x", role="customer")
            for i in range(customers)
        ]
        session.add(product)
        session.add_all(users)
        session.commit()
        return product.id, [u.id for u in users]


def _race(SessionFactory, product_id, attempts):
    """attempts: list of (user_id, quantity); returns outcome per attempt."""
    barrier = threading.Barrier(len(attempts))

    def attempt(user_id, quantity):
        session = SessionFactory()
        try:
            barrier.wait()
            place_order(session, user_id, [RequestedItem(product_id, quantity)])
            return "ok"
        except InsufficientStock:
            return "insufficient"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=len(attempts)) as pool:
        futures = [pool.submit(attempt, uid, qty) for uid, qty in attempts]
        return [f.result() for f in futures]


def _stock(SessionFactory, product_id):
    with SessionFactory() as session:
        return session.get(Product, product_id).stock_quantity


def test_two_orders_racing_for_last_units(file_sessionmaker):
    product_id, (alice, bob) = _seed(file_sessionmaker, stock=2, customers=2)

    outcomes = _race(file_sessionmaker, product_id, [(alice, 2), (bob, 1)])

    assert sorted(outcomes) == ["insufficient", "ok"]
    stock = _stock(file_sessionmaker, product_id)
    assert stock in (0, 1)
    with file_sessionmaker() as session:
        sold = sum(
            item.quantity for order in session.query(Order).all() for item in order.items
        )
    assert stock + sold == 2


def test_many_orders_exhaust_stock_exactly(file_sessionmaker):
    product_id, buyers = _seed(file_sessionmaker, stock=5, customers=12)

    outcomes = _race(file_sessionmaker, product_id, [(uid, 1) for uid in buyers])

    assert outcomes.count("ok") == 5
    assert outcomes.count("insufficient") == 7
    assert _stock(file_sessionmaker, product_id) == 0
    with file_sessionmaker() as session:
        assert session.query(Order).count() == 5
        for order in session.query(Order).all():
            assert order.total_amount == sum(i.line_total for i in order.items)


def test_read_transaction_holds_the_write_lock(file_sessionmaker, tmp_path):
    reader = file_sessionmaker()
    other = sqlite3.connect(tmp_path / "orders.db", timeout=0.1, isolation_level=None)
    try:
        reader.execute(text("SELECT 1"))

        with pytest.raises(sqlite3.OperationalError):
            other.execute("BEGIN IMMEDIATE")

        reader.close()
        other.execute("BEGIN IMMEDIATE")
        other.execute("ROLLBACK")
    finally:
        reader.close()
        other.close()
