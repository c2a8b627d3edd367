from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from app.models.product import MAX_QUANTITY

class PricingTierSchema(BaseModel):
    min_quantity: int = Field(gt=0)
    max_quantity: Optional[int] = None
    unit_price: Decimal = Field(ge=0, decimal_places=2)

    @model_validator(mode="after")
    def check_range(self):
        if self.max_quantity is not None and self.max_quantity < self.min_quantity:
            raise ValueError("max_quantity must be >= min_quantity")
        return self

    class Config:
        from_attributes = True

class ProductBase(BaseModel):
    name: str
    sku: Optional[str] = None
    base_price: Decimal = Field(ge=0, decimal_places=2)
    tax_rate: Decimal = Decimal("0")
    stock_quantity: int = Field(ge=0, le=MAX_QUANTITY)
    is_active: bool = True

def sorted_tiers(tiers):
    """Tiers in ascending min_quantity; rejects overlapping ranges."""
    tiers = sorted(tiers, key=lambda t: t.min_quantity)
    for previous, current in zip(tiers, tiers[1:]):
        if previous.max_quantity is None or current.min_quantity <= previous.max_quantity:
            raise ValueError(
                f"Pricing tier starting at {current.min_quantity} overlaps the previous tier"
            )
    return tiers

class ProductCreate(ProductBase):
    pricing_tiers: List[PricingTierSchema] = []

    @model_validator(mode="after")
    def check_tiers_do_not_overlap(self):
        self.pricing_tiers = sorted_tiers(self.pricing_tiers)
        return self

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    base_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    tax_rate: Optional[Decimal] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    is_active: Optional[bool] = None
    # replaces the whole tier set when given
    pricing_tiers: Optional[List[PricingTierSchema]] = None

    @model_validator(mode="after")
    def check_tiers_do_not_overlap(self):
        if self.pricing_tiers is not None:
            self.pricing_tiers = sorted_tiers(self.pricing_tiers)
        return self

class ProductResponse(ProductBase):
    id: int
    pricing_tiers: List[PricingTierSchema] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class AppliedTier(BaseModel):
    min_quantity: int
    max_quantity: Optional[int] = None
    unit_price: Decimal

class PriceQuoteResponse(BaseModel):
    product_id: int
    name: str
    quantity: int
    base_price: Decimal
    unit_price: Decimal
    line_total: Decimal
    tier_applied: bool
    applied_tier: Optional[AppliedTier] = None
    stock_quantity: int
    in_stock: bool
