from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.connection import Base

# largest value an Integer column holds on every supported backend
MAX_QUANTITY = 2**31 - 1

class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, unique=True, nullable=True)

    base_price = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pricing_tiers = relationship(
        "PricingTier",
        back_populates="product",
        order_by="PricingTier.min_quantity",
        cascade="all, delete-orphan",
    )


class PricingTier(Base):
    __tablename__ = "product_pricing_tiers"
    __table_args__ = (
        CheckConstraint("min_quantity > 0", name="ck_tiers_min_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_tiers_unit_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    min_quantity = Column(Integer, nullable=False)
    max_quantity = Column(Integer, nullable=True)  # NULL = unbounded
    unit_price = Column(Numeric(12, 2), nullable=False)

    product = relationship("Product", back_populates="pricing_tiers")
