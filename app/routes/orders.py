import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.dependencies.auth import require_admin, require_auth
from app.enums.order_status import OrderStatus
from app.enums.user_roles import UserRole
from app.models.order import Order
from app.models.user import User
from app.schemas.order import (
    OrderCreate,
    OrderDetailResponse,
    OrderItemResponse,
    OrderListItem,
    OrderListResponse,
    OrderPlacedResponse,
    OrderStatusUpdate,
    OrderSummaryResponse,
    Pagination,
)
from app.services.order_service import (
    get_order,
    list_orders,
    place_order,
    update_order_status,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


def to_list_item(order: Order) -> OrderListItem:
    return OrderListItem(
        id=order.id,
        order_number=order.order_number,
        total_amount=order.total_amount,
        status=order.status,
        item_count=len(order.items),
        customer_name=order.user.username if order.user else None,
        customer_email=order.user.email if order.user else None,
        created_at=order.created_at,
    )


def to_list_response(orders, total: int, page: int, page_size: int) -> OrderListResponse:
    return OrderListResponse(
        orders=[to_list_item(o) for o in orders],
        pagination=Pagination(
            page=page,
            page_size=page_size,
            total=total,
            pages=math.ceil(total / page_size) if page_size else 0,
        ),
    )


def to_detail(order: Order) -> OrderDetailResponse:
    return OrderDetailResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        customer_name=order.user.username if order.user else None,
        customer_email=order.user.email if order.user else None,
        status=order.status,
        total_amount=order.total_amount,
        shipping_address_id=order.shipping_address_id,
        items=[
            OrderItemResponse(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
            )
            for item in order.items
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------- PLACE ORDER ----------

@router.post("/", response_model=OrderPlacedResponse, status_code=201)
def place_order_route(
    body: OrderCreate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    summary = place_order(
        db,
        user_id=user.id,
        items=body.items,
        shipping_address_id=body.shipping_address_id,
    )
    return OrderPlacedResponse(
        order=OrderSummaryResponse(
            id=summary.id,
            order_number=summary.order_number,
            total_amount=summary.total_amount,
            status=summary.status,
        )
    )


# ---------- LIST ----------

@router.get("/my-orders", response_model=OrderListResponse)
def my_orders_route(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: str = "created_at",
    sort_order: str = "desc",
    status: Optional[OrderStatus] = None,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Customer's own orders, sortable by created_at, total_amount, status or order_number."""
    orders, total = list_orders(
        db,
        user_id=user.id,
        status=status.value if status else None,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return to_list_response(orders, total, page, page_size)


@router.get("/", response_model=OrderListResponse)
def list_orders_route(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Admins see every order, everyone else only their own."""
    is_admin = user.role == UserRole.admin.value
    orders, total = list_orders(
        db,
        user_id=None if is_admin else user.id,
        status=status.value if status else None,
        page=page,
        page_size=page_size,
    )
    return to_list_response(orders, total, page, page_size)


# ---------- DETAIL ----------

@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order_route(
    order_id: int,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    is_admin = user.role == UserRole.admin.value
    order = get_order(db, order_id, user_id=None if is_admin else user.id)
    return to_detail(order)


# ---------- STATUS ----------

@router.put(
    "/{order_id}/status",
    response_model=OrderSummaryResponse,
    dependencies=[Depends(require_admin)],
)
def update_order_status_route(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
):
    return update_order_status(db, order_id, body.status)
