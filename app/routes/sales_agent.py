import math
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.dependencies.auth import require_sales_agent
from app.enums.order_status import OrderStatus
from app.enums.user_roles import UserRole
from app.models.user import User
from app.routes.orders import to_list_response
from app.schemas.commission import CommissionListResponse, CommissionResponse
from app.schemas.order import OrderListResponse, Pagination
from app.schemas.sales_agent import (
    DashboardResponse,
    DashboardStats,
    ReferredCustomer,
    ReferredCustomerListResponse,
)
from app.schemas.user import CustomerCreate, UserResponse
from app.services.commission_service import agent_sales_summary, list_agent_commissions
from app.services.order_service import list_orders
from app.services.user_service import (
    count_referred_customers,
    create_user,
    get_user_by_username,
    list_referred_customers,
)

router = APIRouter(prefix="/sales-agent", tags=["Sales Agent"])


@router.get("/dashboard", response_model=DashboardResponse)
def agent_dashboard_route(
    period: int = Query(30, ge=1, le=365),
    agent: User = Depends(require_sales_agent),
    db: Session = Depends(get_db),
):
    """Referred customers, plus orders, sales and commission over the last `period` days."""
    since = datetime.utcnow() - timedelta(days=period)
    summary = agent_sales_summary(db, agent.id, since)

    return DashboardResponse(
        stats=DashboardStats(
            customers=count_referred_customers(db, agent.id),
            orders=summary["order_count"],
            total_sales=summary["total_sales"],
            total_commission=summary["total_commission"],
        ),
        period_days=period,
    )


@router.get("/customers", response_model=ReferredCustomerListResponse)
def agent_customers_route(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    agent: User = Depends(require_sales_agent),
    db: Session = Depends(get_db),
):
    rows, total = list_referred_customers(db, agent.id, page=page, limit=limit, search=search)
    return ReferredCustomerListResponse(
        customers=[
            ReferredCustomer(
                id=customer.id,
                username=customer.username,
                email=customer.email,
                is_active=customer.is_active,
                order_count=order_count,
                total_spent=total_spent,
                created_at=customer.created_at,
            )
            for customer, order_count, total_spent in rows
        ],
        pagination=Pagination(
            page=page,
            page_size=limit,
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
        ),
    )


@router.get("/orders", response_model=OrderListResponse)
def agent_orders_route(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    agent: User = Depends(require_sales_agent),
    db: Session = Depends(get_db),
):
    """Orders placed by customers this agent referred."""
    orders, total = list_orders(
        db,
        sales_agent_id=agent.id,
        status=status.value if status else None,
        page=page,
        page_size=page_size,
    )
    return to_list_response(orders, total, page, page_size)


@router.get("/commissions", response_model=CommissionListResponse)
def agent_commissions_route(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    agent: User = Depends(require_sales_agent),
    db: Session = Depends(get_db),
):
    items, total = list_agent_commissions(db, agent.id, page=page, limit=limit)
    return CommissionListResponse(
        commissions=[
            CommissionResponse(
                id=c.id,
                order_id=c.order_id,
                order_number=c.order.order_number,
                order_total=c.order.total_amount,
                commission_rate=c.commission_rate,
                commission_amount=c.commission_amount,
                status=c.status,
                customer_name=c.order.user.username if c.order.user else None,
                created_at=c.created_at,
            )
            for c in items
        ],
        pagination=Pagination(
            page=page,
            page_size=limit,
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
        ),
    )


@router.post("/register-customer", response_model=UserResponse, status_code=201)
def register_customer_route(
    data: CustomerCreate,
    agent: User = Depends(require_sales_agent),
    db: Session = Depends(get_db),
):
    """Register a customer whose orders will be credited to this agent."""
    if get_user_by_username(db, data.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    return create_user(
        db,
        username=data.username,
        password=data.password,
        email=data.email,
        role=UserRole.customer.value,
        sales_agent_id=agent.id,
    )
