import logging

from sqlalchemy import and_, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientStock, ProductNotFound
from app.models.product import MAX_QUANTITY, Product

logger = logging.getLogger(__name__)


def _reject(db: Session, product_id: int, quantity: int) -> None:
    """Raise the typed failure for a reservation that matched no row."""
    row = db.execute(
        select(Product.stock_quantity, Product.is_active).where(Product.id == product_id)
    ).first()

    if row is None or not row.is_active:
        raise ProductNotFound(product_id)

    logger.warning(
        f"Stock reservation rejected for product {product_id}: "
        f"requested={quantity} available={row.stock_quantity}"
    )
    raise InsufficientStock(product_id, requested=quantity, available=int(row.stock_quantity))


def reserve_stock(db: Session, product_id: int, quantity: int) -> int:
    """
    Atomically take `quantity` units of a product inside the caller's
    transaction and return the stock left.

    The decrement is one conditional UPDATE guarded by the floor check, so
    two transactions that both saw enough stock cannot both succeed: the
    loser matches zero rows and gets InsufficientStock. The same statement
    rechecks is_active, so a product deactivated after it was priced is
    reported as not found. Nothing is released here; rolling back the
    surrounding transaction undoes the decrement.
    """
    if quantity <= 0:
        raise ValueError("Quantity must be positive")

    # no stored stock can cover this, and the driver cannot bind it
    if quantity > MAX_QUANTITY:
        _reject(db, product_id, quantity)

    upd = (
        update(Product)
        .where(
            and_(
                Product.id == product_id,
                Product.is_active.is_(True),
                Product.stock_quantity >= quantity,
            )
        )
        .values(stock_quantity=Product.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )

    res = db.execute(upd)
    if res.rowcount != 1:
        _reject(db, product_id, quantity)

    fresh = db.execute(
        select(Product.stock_quantity).where(Product.id == product_id)
    ).scalar_one()
    return int(fresh)
