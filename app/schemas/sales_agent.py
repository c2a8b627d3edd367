from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.order import Pagination


class DashboardStats(BaseModel):
    customers: int
    orders: int
    total_sales: Decimal
    total_commission: Decimal


class DashboardResponse(BaseModel):
    success: bool = True
    stats: DashboardStats
    period_days: int


class ReferredCustomer(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    is_active: bool
    order_count: int
    total_spent: Decimal
    created_at: datetime


class ReferredCustomerListResponse(BaseModel):
    customers: List[ReferredCustomer]
    pagination: Pagination
