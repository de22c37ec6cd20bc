from datetime import date
from types import SimpleNamespace

import pytest

from apps.bookings.validation import validate_booking


def _package(max_people=40, by_bus=False, pk=1):
    return SimpleNamespace(pk=pk, max_people=max_people, by_bus=by_bus)


def _form(**overrides):
    data = {
        "name": "Nino Beridze",
        "email": "Nino@Example.com ",
        "phone": "",
        "id_number": "01001011234",
        "adults": 1,
        "children": 0,
        "total_price": "100.00",
    }
    data.update(overrides)
    return data


@pytest.mark.parametrize("id_number, valid", [("1234567890", False), ("12345678901", True), ("1234567890a", False)])
def test_id_number_must_be_eleven_digits(id_number, valid):
    result = validate_booking(_form(id_number=id_number), _package(), bookings=[])

    assert result.success is valid
    if not valid:
        assert result.errors["id_number"] == "ID number must be exactly 11 digits"


@pytest.mark.parametrize("adults, valid", [(0, False), (1, True), (20, True), (21, False)])
def test_adult_bounds(adults, valid):
    result = validate_booking(_form(adults=adults), _package(), bookings=[])

    assert result.success is valid
    assert ("adults" in result.errors) is not valid


def test_children_cannot_exceed_limit():
    result = validate_booking(_form(children=21), _package(), bookings=[])

    assert "children" in result.errors


@pytest.mark.parametrize("name", ["N", "Nino 2", "x" * 101])
def test_name_rules(name):
    result = validate_booking(_form(name=name), _package(), bookings=[])

    assert "name" in result.errors


def test_email_is_normalised():
    result = validate_booking(_form(), _package(), bookings=[])

    assert result.success
    assert result.data["email"] == "nino@example.com"


@pytest.mark.parametrize("phone", ["+995 555 12 34 56", "995555123456", "555-123-456"])
def test_georgian_phone_numbers_accepted(phone):
    result = validate_booking(_form(phone=phone), _package(), bookings=[])

    assert result.success, result.errors


def test_foreign_phone_number_rejected():
    result = validate_booking(_form(phone="+1 202 555 0100"), _package(), bookings=[])

    assert "phone" in result.errors


def test_total_price_must_be_positive():
    result = validate_booking(_form(total_price="0"), _package(), bookings=[])

    assert result.errors["total_price"] == "Total price must be positive"


def test_missing_package_is_reported_on_package():
    result = validate_booking(_form())

    assert result.errors["package"] == "Please select a package"


def test_over_capacity_error_lands_on_adults():
    result = validate_booking(_form(adults=11), _package(max_people=10), bookings=[])

    assert not result.success
    assert "11" in result.errors["adults"]
    assert "10" in result.errors["adults"]


def test_children_count_towards_requested_total():
    bookings = [SimpleNamespace(adults=8, children=0, start_date=None, package_date_id=None)]

    result = validate_booking(_form(adults=1, children=2), _package(max_people=10), bookings=bookings)

    assert "adults" in result.errors


def test_bus_tour_requires_a_date():
    result = validate_booking(_form(), _package(by_bus=True), bookings=[])

    assert result.errors["package"] == "Please select a travel date for this bus tour"


def test_bus_tour_date_from_another_package():
    other_date = SimpleNamespace(pk=9, package_id=2, start_date=date(2030, 5, 1), max_people=5)

    result = validate_booking(_form(), _package(by_bus=True), other_date, bookings=[])

    assert "package_date" in result.errors
