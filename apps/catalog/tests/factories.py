"""Small builders shared by the catalog and bookings tests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model

from apps.catalog.models import Bus, Category, Location, Package, PackageDate, Seat

User = get_user_model()


def make_operator(username: str = "operator") -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@agency.ge",
        password="OperatorPass123",
        role=User.ROLE_OPERATOR,
    )


def make_customer(username: str = "customer") -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="CustomerPass123",
    )


def make_package(**overrides) -> Package:
    category, _ = Category.objects.get_or_create(name="Adventure")
    location, _ = Location.objects.get_or_create(name="Kazbegi", country="Georgia")
    fields = {
        "title": "Kazbegi Day Trip",
        "description": "Gergeti Trinity Church by minibus.",
        "price": Decimal("100.00"),
        "duration": "1 day",
        "max_people": 10,
        "category": category,
        "location": location,
    }
    fields.update(overrides)
    return Package.objects.create(**fields)


def make_date(package: Package, start: date | None = None, max_people: int = 5) -> PackageDate:
    start = start or date.today() + timedelta(days=7)
    return PackageDate.objects.create(package=package, start_date=start, end_date=start, max_people=max_people)


def make_bus(package: Package, seat_count: int = 3) -> Bus:
    bus = Bus.objects.create(name="Coach", seat_count=seat_count, package=package)
    Seat.objects.bulk_create(Seat(bus=bus, number=str(number)) for number in range(1, seat_count + 1))
    return bus
