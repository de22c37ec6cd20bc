"""Service functions that write bookings and their payments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction

from apps.catalog.models import Package, PackageDate, Seat

from .availability import date_availability, package_availability
from .exceptions import CapacityExceededError, SeatUnavailableError
from .models import Booking, Discount, Payment

logger = logging.getLogger(__name__)


@dataclass
class BookingPayload:
    package: Package
    name: str
    email: str
    id_number: str
    adults: int
    total_price: Decimal
    children: int = 0
    phone: str = ''
    package_date: Optional[PackageDate] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    seat: Optional[Seat] = None
    seat_selected: bool = False
    discount: Optional[Discount] = None

    @property
    def travelers(self) -> int:
        return self.adults + self.children


def _locked_availability(payload: BookingPayload):
    """Re-read capacity with the governing row locked until the transaction ends."""
    bookings = Booking.objects.filter(package_id=payload.package.pk)
    if payload.package_date is not None:
        locked_date = PackageDate.objects.select_for_update().get(pk=payload.package_date.pk)
        return date_availability(locked_date, bookings)

    locked_package = Package.objects.select_for_update().get(pk=payload.package.pk)
    return package_availability(locked_package, bookings)


@transaction.atomic
def create_booking(payload: BookingPayload) -> Booking:
    """
    Write a booking and its pending payment as one unit.

    Capacity is checked again against the database while the package (or the
    date occurrence for bus tours) is locked, so two simultaneous requests
    cannot both take the last places. If anything fails, neither the booking
    nor the payment is kept.
    """
    availability = _locked_availability(payload)
    if not availability.fits(payload.travelers):
        logger.warning(
            "Capacity exceeded for package %s (date %s): %s requested, %s remaining",
            payload.package.pk,
            payload.package_date.pk if payload.package_date else None,
            payload.travelers,
            availability.remaining,
        )
        raise CapacityExceededError(payload.travelers, availability.remaining, availability.capacity)

    seat = None
    if payload.seat is not None:
        seat = Seat.objects.select_for_update().get(pk=payload.seat.pk)
        if Booking.objects.filter(seat=seat).exists():
            raise SeatUnavailableError(f"Seat {seat.number} is already taken")

    booking = Booking.objects.create(
        package=payload.package,
        package_date=payload.package_date,
        name=payload.name,
        email=payload.email,
        phone=payload.phone or '',
        id_number=payload.id_number,
        adults=payload.adults,
        children=payload.children,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_price=payload.total_price,
        seat=seat,
        seat_selected=payload.seat_selected or seat is not None,
        discount=payload.discount,
    )
    Payment.objects.create(
        booking=booking,
        amount=booking.total_price,
        status=Payment.STATUS_PENDING,
    )

    logger.info("Booking %s created for package %s", booking.confirmation_code, payload.package.pk)
    return booking


@transaction.atomic
def delete_booking(booking: Booking) -> None:
    """Remove the payment first, then the booking."""
    Payment.objects.filter(booking=booking).delete()
    booking_id = booking.pk
    booking.delete()
    logger.info("Booking %s deleted", booking_id)


def sync_payment_amount(booking: Booking) -> None:
    """Keep a still-pending payment in step with an edited booking total."""
    updated = Payment.objects.filter(
        booking=booking,
        status=Payment.STATUS_PENDING,
    ).exclude(amount=booking.total_price).update(amount=booking.total_price)
    if updated:
        logger.info("Payment amount for booking %s updated to %s", booking.pk, booking.total_price)
