import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from time import perf_counter
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.config import settings
from app.core.exceptions import (
    EmptyOrder,
    InvalidStatusTransition,
    OrderError,
    OrderNotFound,
    ProductNotFound,
    TransactionFailure,
)
from app.enums.order_status import OrderStatus, can_transition
from app.models.order import Order, OrderItem
from app.models.user import User
from app.services import cart_service
from app.services.commission_service import CommissionPolicy, record_commission
from app.services.pricing_service.tier_resolver import check_quantity, resolve_unit_price
from app.services.product_service import get_product_for_pricing
from app.services.stock_service import reserve_stock

logger = logging.getLogger(__name__)

CartClearer = Callable[[Session, int], int]


@dataclass(frozen=True)
class RequestedItem:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class OrderSummary:
    id: int
    order_number: str
    total_amount: Decimal
    status: str


def generate_order_number(user_id: int) -> str:
    """
    ORD-<epoch millis>-<user id>-<random>. Readable, not trusted to be
    unique on its own: the UNIQUE constraint on orders.order_number is.
    """
    millis = int(datetime.utcnow().timestamp() * 1000)
    return f"{settings.ORDER_NUMBER_PREFIX}-{millis}-{user_id}-{uuid.uuid4().hex[:4].upper()}"


def _clear_cart_best_effort(db: Session, user_id: int, clear_cart: CartClearer) -> None:
    """
    Runs in a SAVEPOINT so a failing cart never costs the customer the
    order; if the outer transaction aborts, the cart clear goes with it.
    """
    try:
        with db.begin_nested():
            clear_cart(db, user_id)
    except Exception:
        logger.exception(f"Failed to clear cart for user {user_id}; order kept")


# ---------- PLACE ORDER ----------

def place_order(
    db: Session,
    user_id: int,
    items: Sequence,
    shipping_address_id: Optional[int] = None,
    clear_cart: CartClearer = cart_service.clear_cart,
    commission_policy: Optional[CommissionPolicy] = None,
    order_number_factory: Callable[[int], str] = generate_order_number,
) -> OrderSummary:
    """
    Turn requested (product_id, quantity) lines into a pending order.

    Everything happens in the session's single transaction: stock
    reservations, the order and its items, the commission and the cart
    clear either all commit or none do. Failures are raised as OrderError
    subclasses after the transaction has been rolled back.
    """
    if not items:
        raise EmptyOrder()

    requested = [RequestedItem(int(i.product_id), check_quantity(i.quantity)) for i in items]

    policy = commission_policy or CommissionPolicy()
    start = perf_counter()

    try:
        # ---- 1) price every line from the product as seen in this transaction ----
        lines: List[OrderItem] = []
        for item in requested:
            product = get_product_for_pricing(db, item.product_id)
            if not product or not product.is_active:
                raise ProductNotFound(item.product_id)

            unit_price = resolve_unit_price(product, item.quantity)
            lines.append(
                OrderItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    line_total=unit_price * item.quantity,
                )
            )

        # ---- 2) reserve stock; ascending product id keeps lock order stable ----
        for line in sorted(lines, key=lambda ln: ln.product_id):
            reserve_stock(db, line.product_id, line.quantity)

        # ---- 3) order + items ----
        total_amount = sum((line.line_total for line in lines), Decimal("0"))

        order = Order(
            order_number=order_number_factory(user_id),
            user_id=user_id,
            status=OrderStatus.pending.value,
            total_amount=total_amount,
            shipping_address_id=shipping_address_id,
        )
        order.items = lines
        db.add(order)
        db.flush()

        # ---- 4) commission, evaluated with this order already counted ----
        decision = policy.evaluate(db, user_id, order)
        if decision is not None:
            record_commission(db, order, decision)

        # ---- 5) cart ----
        _clear_cart_best_effort(db, user_id, clear_cart)

        db.commit()
    except OrderError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Order for user {user_id} hit a constraint conflict: {e.orig}")
        raise TransactionFailure() from e
    except OperationalError as e:
        db.rollback()
        logger.error(f"Order for user {user_id} could not be committed: {e.orig}")
        raise TransactionFailure() from e
    except Exception:
        db.rollback()
        raise

    duration_ms = (perf_counter() - start) * 1000.0
    if duration_ms > settings.SLOW_ORDER_MS:
        logger.warning(f"Order {order.order_number} took {duration_ms:.2f} ms to place")

    logger.info(
        f"Order {order.order_number} placed by user {user_id}: "
        f"{len(lines)} item(s), total {total_amount}"
    )

    return OrderSummary(
        id=order.id,
        order_number=order.order_number,
        total_amount=total_amount,
        status=OrderStatus.pending.value,
    )


# ---------- READ ----------

def get_order(db: Session, order_id: int, user_id: Optional[int] = None) -> Order:
    """Order with items; restricted to `user_id` when given."""
    query = (
        db.query(Order)
        .options(
            selectinload(Order.items).joinedload(OrderItem.product),
            joinedload(Order.user),
        )
        .filter(Order.id == order_id)
    )
    if user_id is not None:
        query = query.filter(Order.user_id == user_id)

    order = query.first()
    if not order:
        raise OrderNotFound(order_id)
    return order


SORTABLE_COLUMNS = {
    "created_at": Order.created_at,
    "total_amount": Order.total_amount,
    "status": Order.status,
    "order_number": Order.order_number,
}


def list_orders(
    db: Session,
    user_id: Optional[int] = None,
    sales_agent_id: Optional[int] = None,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> Tuple[List[Order], int]:
    """
    Returns (items, total_count). page is 1-based.
    user_id limits to one customer, sales_agent_id to customers referred
    by that agent; neither means every order (admin view).
    """
    if page < 1:
        page = 1
    MAX_PAGE_SIZE = 100
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)

    query = db.query(Order)
    if user_id is not None:
        query = query.filter(Order.user_id == user_id)
    if sales_agent_id is not None:
        query = query.join(User, Order.user_id == User.id).filter(
            User.sales_agent_id == sales_agent_id
        )
    if status:
        query = query.filter(Order.status == status)

    total = query.with_entities(func.count(Order.id)).scalar() or 0

    column = SORTABLE_COLUMNS.get(sort_by, Order.created_at)
    ordering = column.asc() if sort_order.lower() == "asc" else column.desc()

    items = (
        query.options(selectinload(Order.items), joinedload(Order.user))
        .order_by(ordering, Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


# ---------- STATUS TRANSITIONS ----------

def update_order_status(db: Session, order_id: int, new_status: OrderStatus) -> Order:
    order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
    if not order:
        raise OrderNotFound(order_id)

    current = OrderStatus(order.status)
    target = OrderStatus(new_status)
    if not can_transition(current, target):
        db.rollback()
        raise InvalidStatusTransition(current.value, target.value)

    order.status = target.value
    order.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(order)

    logger.info(f"Order {order.order_number} moved {current.value} -> {target.value}")
    return order
