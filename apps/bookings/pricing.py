"""Booking price rules."""

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

TWO_PLACES = Decimal('0.01')


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate_total(price, adults: int, children: int = 0, seat_selected: bool = False) -> Decimal:
    """
    Total for a booking: full price per adult, half price per child and a
    flat fee when the customer picks a seat.
    """
    unit = Decimal(str(price))
    child_ratio = Decimal(str(settings.BOOKING_CHILD_PRICE_RATIO))
    total = unit * adults + unit * child_ratio * (children or 0)
    if seat_selected:
        total += Decimal(str(settings.BOOKING_SEAT_SELECTION_FEE))
    return _money(total)


def apply_discount(total, discount=None) -> Decimal:
    """Subtract a flat discount; expired or inactive codes change nothing."""
    total = _money(total)
    if discount is None or not discount.is_valid():
        return total
    return max(_money(total - discount.amount), Decimal('0.00'))


def quote_for(package, adults: int, children: int = 0, seat_selected: bool = False, discount=None) -> Decimal:
    total = calculate_total(package.effective_price, adults, children, seat_selected)
    return apply_discount(total, discount)
