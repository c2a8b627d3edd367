from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.dependencies.auth import require_auth
from app.models.user import User
from app.schemas.cart import CartItemCreate, CartItemResponse, CartItemUpdate, CartResponse
from app.services import cart_service
from app.services.pricing_service.tier_resolver import resolve_unit_price

router = APIRouter(prefix="/cart", tags=["Cart"])


def _cart_response(items) -> CartResponse:
    lines = []
    for item in items:
        unit_price = resolve_unit_price(item.product, item.quantity)
        lines.append(
            CartItemResponse(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=unit_price * item.quantity,
            )
        )
    return CartResponse(
        items=lines,
        total_amount=sum((line.line_total for line in lines), Decimal("0")),
    )


@router.get("/", response_model=CartResponse)
def get_cart_route(
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return _cart_response(cart_service.get_cart(db, user.id))


@router.post("/", response_model=CartResponse, status_code=201)
def add_to_cart_route(
    body: CartItemCreate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        cart_service.add_to_cart(db, user.id, body.product_id, body.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _cart_response(cart_service.get_cart(db, user.id))


@router.put("/{item_id}", response_model=CartResponse)
def update_cart_item_route(
    item_id: int,
    body: CartItemUpdate,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        cart_service.update_cart_item(db, user.id, item_id, body.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _cart_response(cart_service.get_cart(db, user.id))


@router.delete("/{item_id}", response_model=CartResponse)
def remove_cart_item_route(
    item_id: int,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    cart_service.remove_cart_item(db, user.id, item_id)
    return _cart_response(cart_service.get_cart(db, user.id))


@router.delete("/")
def clear_cart_route(
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    removed = cart_service.clear_cart(db, user.id)
    db.commit()
    return {"success": True, "removed": removed, "message": "Cart cleared successfully"}
