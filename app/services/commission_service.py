import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.enums.commission_status import CommissionStatus
from app.models.commission import Commission
from app.models.order import Order
from app.models.user import User
from app.services import user_service

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CommissionDecision:
    sales_agent_id: int
    commission_rate: Decimal
    commission_amount: Decimal
    status: str = CommissionStatus.pending.value


class CommissionPolicy:
    """
    Agent-referred customers earn their agent a flat-rate commission on
    their first `max_orders` orders. The order being evaluated must already
    be flushed so it is part of the lifetime count.
    """

    def __init__(self, rate=None, max_orders: Optional[int] = None):
        rate = settings.COMMISSION_RATE if rate is None else rate
        self.rate = Decimal(str(rate))
        self.max_orders = settings.COMMISSION_MAX_ORDERS if max_orders is None else max_orders

    def amount_for(self, total_amount) -> Decimal:
        amount = Decimal(total_amount) * self.rate / Decimal(100)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    def evaluate(self, db: Session, customer_id: int, order: Order) -> Optional[CommissionDecision]:
        agent_id = user_service.get_assigned_agent(db, customer_id)
        if agent_id is None:
            return None

        # TODO: cancelled orders still count toward the cut-off; confirm with product whether they should
        order_count = user_service.get_lifetime_order_count(db, customer_id)
        if order_count > self.max_orders:
            logger.debug(
                f"No commission for order {order.order_number}: "
                f"customer {customer_id} is on order #{order_count}"
            )
            return None

        return CommissionDecision(
            sales_agent_id=agent_id,
            commission_rate=self.rate,
            commission_amount=self.amount_for(order.total_amount),
        )


def record_commission(db: Session, order: Order, decision: CommissionDecision) -> Commission:
    """Stage the commission row in the caller's transaction."""
    commission = Commission(
        sales_agent_id=decision.sales_agent_id,
        order_id=order.id,
        commission_rate=decision.commission_rate,
        commission_amount=decision.commission_amount,
        status=decision.status,
    )
    db.add(commission)
    logger.info(
        f"Commission {decision.commission_amount} ({decision.commission_rate}%) "
        f"for agent {decision.sales_agent_id} on order {order.order_number}"
    )
    return commission


def list_agent_commissions(
    db: Session,
    sales_agent_id: int,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Commission], int]:
    """
    Returns (items, total_count), newest first. page is 1-based.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), 100)

    query = db.query(Commission).filter(Commission.sales_agent_id == sales_agent_id)
    total = query.with_entities(func.count(Commission.id)).scalar() or 0

    items = (
        query.options(joinedload(Commission.order).joinedload(Order.user))
        .order_by(Commission.created_at.desc(), Commission.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def agent_sales_summary(db: Session, sales_agent_id: int, since: datetime) -> Dict[str, Any]:
    """
    Orders placed by the agent's referred customers and commissions earned
    by the agent, both counted from `since`.
    """
    order_count, total_sales = db.execute(
        select(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
        .join(User, Order.user_id == User.id)
        .where(User.sales_agent_id == sales_agent_id, Order.created_at >= since)
    ).one()

    total_commission = db.execute(
        select(func.coalesce(func.sum(Commission.commission_amount), 0)).where(
            Commission.sales_agent_id == sales_agent_id,
            Commission.created_at >= since,
        )
    ).scalar()

    return {
        "order_count": int(order_count or 0),
        "total_sales": Decimal(str(total_sales or 0)).quantize(CENT),
        "total_commission": Decimal(str(total_commission or 0)).quantize(CENT),
    }
