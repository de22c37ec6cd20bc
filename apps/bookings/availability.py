"""
Remaining capacity for packages and bus-tour date occurrences.

Everything here works on plain in-memory collections (model instances or any
objects with the same attributes), so callers decide where the bookings come
from: a prefetched queryset for the catalog, or rows locked inside a
transaction when a booking is written.

Remaining capacity is always an int and may be negative when a package is
overbooked; ``remaining <= 0`` means the package or occurrence is full.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional

from django.utils import timezone


@dataclass(frozen=True)
class Availability:
    capacity: int
    booked: int

    @property
    def remaining(self) -> int:
        return self.capacity - self.booked

    @property
    def is_available(self) -> bool:
        return self.remaining > 0

    def fits(self, travelers: int) -> bool:
        return travelers <= self.remaining

    def as_dict(self) -> dict:
        return {
            'capacity': self.capacity,
            'booked': self.booked,
            'remaining': self.remaining,
            'is_available': self.is_available,
        }


@dataclass(frozen=True)
class DateAvailability:
    package_date: object
    availability: Availability

    def as_dict(self) -> dict:
        return {
            'id': self.package_date.pk,
            'start_date': self.package_date.start_date,
            'end_date': self.package_date.end_date,
            **self.availability.as_dict(),
        }


@dataclass
class PackageAvailability:
    by_bus: bool
    package: Optional[Availability] = None
    dates: List[DateAvailability] = field(default_factory=list)

    @property
    def no_dates_set(self) -> bool:
        # A bus tour without dates cannot be booked, which is not the same as full.
        return self.by_bus and not self.dates

    def as_dict(self) -> dict:
        data = {
            'by_bus': self.by_bus,
            'no_dates_set': self.no_dates_set,
        }
        if self.package is not None:
            data.update(self.package.as_dict())
        if self.by_bus:
            data['dates'] = [item.as_dict() for item in self.dates]
        return data


def calendar_day(value) -> Optional[date]:
    """Reduce a date or datetime to its calendar day in the project timezone."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def booked_adults(bookings: Iterable) -> int:
    return sum(booking.adults or 0 for booking in bookings)


def bookings_for_date(package_date, bookings: Iterable) -> list:
    """
    Bookings that belong to one date occurrence.

    Bookings carrying an explicit ``package_date`` reference match on it.
    Older rows without the reference fall back to comparing their start date
    with the occurrence's start date by calendar day.
    """
    day = calendar_day(package_date.start_date)
    matched = []
    for booking in bookings:
        date_id = getattr(booking, 'package_date_id', None)
        if date_id is not None:
            if date_id == package_date.pk:
                matched.append(booking)
            continue
        start = getattr(booking, 'start_date', None)
        if start is not None and calendar_day(start) == day:
            matched.append(booking)
    return matched


def package_availability(package, bookings: Iterable) -> Availability:
    return Availability(capacity=package.max_people, booked=booked_adults(bookings))


def date_availability(package_date, bookings: Iterable) -> Availability:
    matched = bookings_for_date(package_date, bookings)
    return Availability(capacity=package_date.max_people, booked=booked_adults(matched))


def package_remaining(package, bookings: Iterable) -> int:
    return package_availability(package, bookings).remaining


def date_remaining(package_date, bookings: Iterable) -> int:
    return date_availability(package_date, bookings).remaining


def capacity_for(package, package_date, bookings: Iterable) -> Optional[Availability]:
    """
    The availability that governs a booking request.

    Returns None for a bus tour when no date occurrence was chosen, since
    there is nothing to measure the request against.
    """
    if package.by_bus:
        if package_date is None:
            return None
        return date_availability(package_date, bookings)
    return package_availability(package, bookings)


def summarize_package(package, bookings: Optional[Iterable] = None, dates: Optional[Iterable] = None) -> PackageAvailability:
    if bookings is None:
        bookings = package.bookings.all()
    bookings = list(bookings)

    if not package.by_bus:
        return PackageAvailability(by_bus=False, package=package_availability(package, bookings))

    if dates is None:
        dates = package.dates.all()
    return PackageAvailability(
        by_bus=True,
        dates=[
            DateAvailability(package_date=item, availability=date_availability(item, bookings))
            for item in dates
        ],
    )
