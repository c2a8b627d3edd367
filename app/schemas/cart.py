from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from app.models.product import MAX_QUANTITY


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(default=1, gt=0, le=MAX_QUANTITY)


class CartItemUpdate(BaseModel):
    quantity: int = Field(gt=0, le=MAX_QUANTITY)


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class CartResponse(BaseModel):
    items: List[CartItemResponse]
    total_amount: Decimal
