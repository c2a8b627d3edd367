from decimal import Decimal
from typing import Any, Dict, Optional


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _select_tier(product, quantity: int):
    """
    First tier (ascending min_quantity) whose range contains quantity.
    Both bounds are inclusive; a missing max_quantity is unbounded.
    """
    tiers = sorted(product.pricing_tiers or [], key=lambda t: t.min_quantity)

    for tier in tiers:
        if quantity < tier.min_quantity:
            continue
        if tier.max_quantity is not None and quantity > tier.max_quantity:
            continue
        return tier
    return None


def check_quantity(quantity) -> int:
    """Quantities are positive ints; floats, bools and numeric strings are refused, never coerced."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError("Quantity must be a positive integer")
    return quantity


def resolve_unit_price(product, quantity: int) -> Decimal:
    """
    Unit price for buying `quantity` units of `product`.

    Falls back to product.base_price when no tier covers the quantity
    (including products without tiers). Pure: reads only the product
    snapshot passed in.
    """
    check_quantity(quantity)

    tier = _select_tier(product, quantity)
    if tier is not None:
        return _to_decimal(tier.unit_price)
    return _to_decimal(product.base_price)


def quote_line(product, quantity: int) -> Dict[str, Any]:
    """Price breakdown for one line, used by the pricing preview."""
    unit_price = resolve_unit_price(product, quantity)
    tier = _select_tier(product, quantity)

    applied_tier: Optional[Dict[str, Any]] = None
    if tier is not None:
        applied_tier = {
            "min_quantity": tier.min_quantity,
            "max_quantity": tier.max_quantity,
            "unit_price": _to_decimal(tier.unit_price),
        }

    return {
        "quantity": quantity,
        "base_price": _to_decimal(product.base_price),
        "unit_price": unit_price,
        "line_total": unit_price * quantity,
        "tier_applied": applied_tier is not None,
        "applied_tier": applied_tier,
    }
