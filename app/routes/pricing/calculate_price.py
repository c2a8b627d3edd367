from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.product import PriceQuoteResponse
from app.services.product_service import get_product_for_pricing
from app.services.pricing_service.tier_resolver import quote_line

router = APIRouter(tags=["Pricing"])


@router.get("/products/{product_id}/calculate-price", response_model=PriceQuoteResponse)
def calculate_price(
    product_id: int,
    quantity: int = 1,
    db: Session = Depends(get_db),
):
    """
    Preview the tier price for a quantity. The price is charged only when
    the order is placed; stock is not reserved here.
    """
    if quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be positive")

    product = get_product_for_pricing(db, product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")

    quote = quote_line(product, quantity)

    return PriceQuoteResponse(
        product_id=product.id,
        name=product.name,
        stock_quantity=product.stock_quantity,
        in_stock=product.stock_quantity >= quantity,
        **quote,
    )
