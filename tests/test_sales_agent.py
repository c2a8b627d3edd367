from datetime import datetime, timedelta
from decimal import Decimal

from app.models.order import Order
from app.routes.sales_agent import agent_customers_route, agent_dashboard_route
from app.services.order_service import RequestedItem, place_order
from app.services.user_service import count_referred_customers, list_referred_customers


def _old_order(db, user_id, days_ago=40, total="1000.00"):
    db.add(
        Order(
            order_number=f"ORD-OLD-{user_id}",
            user_id=user_id,
            status="delivered",
            total_amount=Decimal(total),
            created_at=datetime.utcnow() - timedelta(days=days_ago),
        )
    )
    db.commit()


def test_dashboard_counts_the_period_only(
    db, sales_agent, referred_customer, customer, user_factory, tiered_product
):
    user_factory(sales_agent_id=sales_agent.id)
    place_order(db, referred_customer.id, [RequestedItem(tiered_product.id, 5)])
    place_order(db, referred_customer.id, [RequestedItem(tiered_product.id, 1)])
    place_order(db, customer.id, [RequestedItem(tiered_product.id, 1)])
    _old_order(db, referred_customer.id)

    dashboard = agent_dashboard_route(period=30, agent=sales_agent, db=db)

    assert dashboard.period_days == 30
    assert dashboard.stats.customers == 2
    assert dashboard.stats.orders == 2
    assert dashboard.stats.total_sales == Decimal("550.00")
    assert dashboard.stats.total_commission == Decimal("27.50")

    wider = agent_dashboard_route(period=60, agent=sales_agent, db=db)
    assert wider.stats.orders == 3
    assert wider.stats.total_sales == Decimal("1550.00")


def test_dashboard_for_agent_without_customers(db, sales_agent):
    dashboard = agent_dashboard_route(period=30, agent=sales_agent, db=db)

    assert dashboard.stats.customers == 0
    assert dashboard.stats.orders == 0
    assert dashboard.stats.total_sales == Decimal("0.00")
    assert dashboard.stats.total_commission == Decimal("0.00")


def test_inactive_customers_are_not_counted(db, sales_agent, referred_customer):
    referred_customer.is_active = False
    db.commit()

    assert count_referred_customers(db, sales_agent.id) == 0


def test_customers_list_with_order_totals(
    db, sales_agent, referred_customer, customer, user_factory, tiered_product
):
    quiet = user_factory(sales_agent_id=sales_agent.id)
    place_order(db, referred_customer.id, [RequestedItem(tiered_product.id, 5)])
    place_order(db, customer.id, [RequestedItem(tiered_product.id, 1)])

    listing = agent_customers_route(page=1, limit=10, search=None, agent=sales_agent, db=db)

    assert listing.pagination.total == 2
    by_id = {c.id: c for c in listing.customers}
    assert set(by_id) == {referred_customer.id, quiet.id}
    assert by_id[referred_customer.id].order_count == 1
    assert by_id[referred_customer.id].total_spent == Decimal("450.00")
    assert by_id[quiet.id].order_count == 0
    assert by_id[quiet.id].total_spent == Decimal("0.00")


def test_customers_search_and_pagination(db, sales_agent, user_factory):
    for _ in range(3):
        user_factory(sales_agent_id=sales_agent.id)
    target = user_factory(sales_agent_id=sales_agent.id)

    rows, total = list_referred_customers(db, sales_agent.id, search=target.email.upper())
    assert total == 1
    assert rows[0][0].id == target.id

    rows, total = list_referred_customers(db, sales_agent.id, page=2, limit=3)
    assert total == 4
    assert len(rows) == 1
