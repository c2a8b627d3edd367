from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.pricing_service.tier_resolver import quote_line, resolve_unit_price


def _tier(lo, hi, price):
    return SimpleNamespace(min_quantity=lo, max_quantity=hi, unit_price=Decimal(price))


def _product(base="120.00", tiers=()):
    return SimpleNamespace(base_price=Decimal(base), pricing_tiers=list(tiers))


@pytest.fixture()
def product():
    return _product(
        tiers=[_tier(1, 3, "100.00"), _tier(4, 11, "90.00"), _tier(12, None, "80.00")]
    )


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (1, "100.00"),   # min of first tier
        (3, "100.00"),   # max of first tier is inclusive
        (4, "90.00"),    # one above max falls into next tier
        (11, "90.00"),
        (12, "80.00"),
        (500, "80.00"),  # unbounded tier
    ],
)
def test_tier_boundaries(product, quantity, expected):
    assert resolve_unit_price(product, quantity) == Decimal(expected)


def test_falls_back_to_base_price_without_tiers():
    assert resolve_unit_price(_product(base="42.50"), 7) == Decimal("42.50")


def test_falls_back_to_base_price_outside_every_tier():
    product = _product(tiers=[_tier(5, 10, "90.00")])

    assert resolve_unit_price(product, 4) == Decimal("120.00")
    assert resolve_unit_price(product, 11) == Decimal("120.00")


def test_overlapping_tiers_first_by_min_quantity_wins():
    # deliberately stored out of order
    product = _product(tiers=[_tier(5, 20, "70.00"), _tier(1, 10, "95.00")])

    assert resolve_unit_price(product, 7) == Decimal("95.00")


def test_resolution_is_repeatable(product):
    first = resolve_unit_price(product, 5)
    second = resolve_unit_price(product, 5)

    assert first == second == Decimal("90.00")
    assert [t.unit_price for t in product.pricing_tiers] == [
        Decimal("100.00"), Decimal("90.00"), Decimal("80.00")
    ]


@pytest.mark.parametrize("quantity", [0, -1, 2.5, True])
def test_rejects_non_positive_or_non_integer_quantity(product, quantity):
    with pytest.raises(ValueError):
        resolve_unit_price(product, quantity)


def test_quote_line_reports_applied_tier(product):
    quote = quote_line(product, 5)

    assert quote["unit_price"] == Decimal("90.00")
    assert quote["line_total"] == Decimal("450.00")
    assert quote["tier_applied"] is True
    assert quote["applied_tier"]["min_quantity"] == 4
    assert quote["applied_tier"]["max_quantity"] == 11


def test_quote_line_without_tier():
    quote = quote_line(_product(base="10.00"), 3)

    assert quote["tier_applied"] is False
    assert quote["applied_tier"] is None
    assert quote["line_total"] == Decimal("30.00")
