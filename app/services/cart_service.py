from typing import List

from sqlalchemy import delete
from sqlalchemy.orm import Session, joinedload

from app.models.cart import CartItem
from app.models.product import MAX_QUANTITY
from app.services.product_service import get_product
from app.core.exceptions import CartItemNotFound, InsufficientStock, ProductNotFound


def _check_line_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise ValueError("Quantity must be positive")
    if quantity > MAX_QUANTITY:
        raise ValueError("Quantity is too large")


def get_cart(db: Session, user_id: int) -> List[CartItem]:
    return (
        db.query(CartItem)
        .options(joinedload(CartItem.product))
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.id)
        .all()
    )


def add_to_cart(db: Session, user_id: int, product_id: int, quantity: int) -> CartItem:
    """Add a line, or bump the quantity if the product is already in the cart."""
    _check_line_quantity(quantity)

    product = get_product(db, product_id)
    if not product or not product.is_active:
        raise ProductNotFound(product_id)

    item = (
        db.query(CartItem)
        .filter(CartItem.user_id == user_id, CartItem.product_id == product_id)
        .first()
    )
    if item:
        _check_line_quantity(item.quantity + quantity)
        item.quantity += quantity
    else:
        item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
        db.add(item)

    db.commit()
    db.refresh(item)
    return item


def _get_own_item(db: Session, user_id: int, item_id: int) -> CartItem:
    item = (
        db.query(CartItem)
        .filter(CartItem.id == item_id, CartItem.user_id == user_id)
        .first()
    )
    if not item:
        raise CartItemNotFound(item_id)
    return item


def update_cart_item(db: Session, user_id: int, item_id: int, quantity: int) -> CartItem:
    """
    Set a line's quantity. Checked against current stock as a courtesy;
    nothing is reserved until the order is placed.
    """
    _check_line_quantity(quantity)
    item = _get_own_item(db, user_id, item_id)

    product = item.product
    if not product or not product.is_active:
        raise ProductNotFound(item.product_id)
    if product.stock_quantity < quantity:
        raise InsufficientStock(product.id, requested=quantity, available=product.stock_quantity)

    item.quantity = quantity
    db.commit()
    db.refresh(item)
    return item


def remove_cart_item(db: Session, user_id: int, item_id: int) -> None:
    item = _get_own_item(db, user_id, item_id)
    db.delete(item)
    db.commit()


def clear_cart(db: Session, user_id: int) -> int:
    """Delete the user's cart lines; does not commit. Returns rows removed."""
    res = db.execute(delete(CartItem).where(CartItem.user_id == user_id))
    return res.rowcount or 0
