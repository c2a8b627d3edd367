from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from app.models.product import PricingTier, Product
from app.schemas.product import ProductCreate, ProductUpdate


# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(db: Session, data: ProductCreate) -> Product:
    product = Product(**data.model_dump(exclude={"pricing_tiers"}))
    product.pricing_tiers = [
        PricingTier(**tier.model_dump()) for tier in data.pricing_tiers
    ]
    db.add(product)
    db.commit()
    db.refresh(product)
    return product

# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()

# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(db: Session, active_only: bool = True) -> List[Product]:
    query = db.query(Product).options(selectinload(Product.pricing_tiers))
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    return query.order_by(Product.id).all()

# --------------------------
# UPDATE PRODUCT
# --------------------------
def update_product(db: Session, product_id: int, data: ProductUpdate) -> Optional[Product]:
    product = get_product(db, product_id)
    if not product:
        return None

    changes = data.model_dump(exclude_unset=True, exclude={"pricing_tiers"})
    for key, value in changes.items():
        setattr(product, key, value)

    if data.pricing_tiers is not None:
        product.pricing_tiers = [
            PricingTier(**tier.model_dump()) for tier in data.pricing_tiers
        ]

    db.commit()
    db.refresh(product)
    return product

# --------------------------
# DEACTIVATE PRODUCT
# --------------------------
def deactivate_product(db: Session, product_id: int) -> bool:
    """Order lines keep referencing the row, so products are never deleted."""
    product = get_product(db, product_id)
    if not product:
        return False

    product.is_active = False
    db.commit()
    return True

# --------------------------
# PRODUCT LOOKUP FOR ORDER PRICING
# --------------------------
def get_product_for_pricing(db: Session, product_id: int) -> Optional[Product]:
    """
    Product with its tiers (ascending min_quantity) as seen by the current
    transaction. Inactive products are returned; the caller decides.
    """
    # populate_existing: never price from an identity-map copy loaded earlier
    return (
        db.query(Product)
        .options(selectinload(Product.pricing_tiers))
        .filter(Product.id == product_id)
        .populate_existing()
        .first()
    )
