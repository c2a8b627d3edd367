from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.enums.order_status import OrderStatus
from app.models.product import MAX_QUANTITY


# ---------- Placement ----------

class OrderItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(gt=0, le=MAX_QUANTITY)


class OrderCreate(BaseModel):
    items: List[OrderItemRequest]
    shipping_address_id: Optional[int] = None


class OrderSummaryResponse(BaseModel):
    id: int
    order_number: str
    total_amount: Decimal
    status: OrderStatus

    class Config:
        from_attributes = True


class OrderPlacedResponse(BaseModel):
    success: bool = True
    order: OrderSummaryResponse
    message: str = "Order created successfully"


# ---------- Reads ----------

class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderDetailResponse(BaseModel):
    id: int
    order_number: str
    user_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    status: OrderStatus
    total_amount: Decimal
    shipping_address_id: Optional[int] = None
    items: List[OrderItemResponse]
    created_at: datetime
    updated_at: datetime


class OrderListItem(BaseModel):
    id: int
    order_number: str
    total_amount: Decimal
    status: OrderStatus
    item_count: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    created_at: datetime


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    pages: int


class OrderListResponse(BaseModel):
    orders: List[OrderListItem]
    pagination: Pagination


# ---------- Status ----------

class OrderStatusUpdate(BaseModel):
    status: OrderStatus
