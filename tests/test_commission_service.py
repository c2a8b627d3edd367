from decimal import Decimal
from types import SimpleNamespace

from app.models.order import Order
from app.services.commission_service import CommissionPolicy


def _add_orders(db, user_id, count, status="pending"):
    existing = db.query(Order).count()
    for i in range(count):
        db.add(
            Order(
                order_number=f"ORD-TEST-{existing + i}",
                user_id=user_id,
                status=status,
                total_amount=Decimal("1000.00"),
            )
        )
    db.commit()


def _order(total="1000.00"):
    return SimpleNamespace(order_number="ORD-EVAL", total_amount=Decimal(total))


def test_no_agent_means_no_commission(db, customer):
    _add_orders(db, customer.id, 1)

    assert CommissionPolicy().evaluate(db, customer.id, _order()) is None


def test_first_three_orders_earn_five_percent(db, referred_customer, sales_agent):
    policy = CommissionPolicy()

    for _ in range(3):
        _add_orders(db, referred_customer.id, 1)
        decision = policy.evaluate(db, referred_customer.id, _order())

        assert decision is not None
        assert decision.sales_agent_id == sales_agent.id
        assert decision.commission_rate == Decimal("5.0")
        assert decision.commission_amount == Decimal("50.00")
        assert decision.status == "pending"


def test_fourth_order_earns_nothing(db, referred_customer):
    _add_orders(db, referred_customer.id, 4)

    assert CommissionPolicy().evaluate(db, referred_customer.id, _order()) is None


def test_cancelled_orders_count_toward_cutoff(db, referred_customer):
    _add_orders(db, referred_customer.id, 3, status="cancelled")
    _add_orders(db, referred_customer.id, 1)

    assert CommissionPolicy().evaluate(db, referred_customer.id, _order()) is None


def test_amount_rounds_half_up_to_cents():
    policy = CommissionPolicy(rate=5.0)

    assert policy.amount_for(Decimal("0.10")) == Decimal("0.01")  # 0.005
    assert policy.amount_for(Decimal("123.45")) == Decimal("6.17")  # 6.1725


def test_rate_and_cutoff_are_overridable(db, referred_customer):
    _add_orders(db, referred_customer.id, 5)
    policy = CommissionPolicy(rate=10, max_orders=5)

    decision = policy.evaluate(db, referred_customer.id, _order("200.00"))

    assert decision.commission_rate == Decimal("10")
    assert decision.commission_amount == Decimal("20.00")
