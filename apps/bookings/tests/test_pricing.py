from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils import timezone

from apps.bookings.models import Discount
from apps.bookings.pricing import apply_discount, calculate_total, quote_for


@pytest.mark.parametrize(
    "price, adults, children, seat, expected",
    [
        ("100", 2, 0, False, "200.00"),
        ("100", 2, 1, False, "250.00"),
        ("100", 2, 1, True, "300.00"),
        ("99.99", 1, 1, False, "149.99"),
    ],
)
def test_calculate_total(price, adults, children, seat, expected):
    assert calculate_total(Decimal(price), adults, children, seat) == Decimal(expected)


def test_calculate_total_is_deterministic():
    first = calculate_total(Decimal("120.50"), 3, 2, True)

    assert calculate_total(Decimal("120.50"), 3, 2, True) == first


def test_expired_discount_is_ignored():
    expired = Discount(code="OLD", amount=Decimal("50"), expires_at=timezone.now() - timedelta(days=1))

    assert apply_discount(Decimal("200"), expired) == Decimal("200.00")


def test_discount_never_goes_below_zero():
    discount = Discount(code="BIG", amount=Decimal("500"), expires_at=timezone.now() + timedelta(days=1))

    assert apply_discount(Decimal("200"), discount) == Decimal("0.00")


def test_quote_uses_sale_price():
    package = SimpleNamespace(effective_price=Decimal("80.00"))

    assert quote_for(package, 2, 0) == Decimal("160.00")
