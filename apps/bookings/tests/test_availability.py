from datetime import date, datetime
from types import SimpleNamespace

from django.utils import timezone

from apps.bookings.availability import (
    bookings_for_date,
    capacity_for,
    date_remaining,
    package_remaining,
    summarize_package,
)


def _booking(adults, children=0, start=None, package_date_id=None):
    return SimpleNamespace(adults=adults, children=children, start_date=start, package_date_id=package_date_id)


def _date(pk, start, max_people):
    return SimpleNamespace(pk=pk, start_date=start, end_date=start, max_people=max_people)


def test_package_remaining_sums_adults_only():
    package = SimpleNamespace(max_people=10, by_bus=False)
    bookings = [_booking(3, children=4), _booking(2)]

    assert package_remaining(package, bookings) == 5


def test_remaining_can_go_negative():
    package = SimpleNamespace(max_people=2, by_bus=False)

    remaining = package_remaining(package, [_booking(3)])

    assert remaining == -1
    assert isinstance(remaining, int)


def test_date_remaining_ignores_other_occurrences():
    d1 = _date(1, date(2030, 5, 1), 5)
    bookings = [
        _booking(3, start=date(2030, 5, 1)),
        _booking(4, start=date(2030, 5, 8)),
    ]

    assert date_remaining(d1, bookings) == 2


def test_date_match_uses_calendar_day_not_timestamp():
    d1 = _date(1, date(2030, 5, 1), 5)
    late_evening = timezone.make_aware(datetime(2030, 5, 1, 21, 30))

    matched = bookings_for_date(d1, [_booking(2, start=late_evening)])

    assert len(matched) == 1


def test_explicit_reference_wins_over_start_date():
    d1 = _date(1, date(2030, 5, 1), 5)
    d2 = _date(2, date(2030, 5, 1), 5)
    bookings = [_booking(2, start=date(2030, 5, 1), package_date_id=2)]

    assert date_remaining(d1, bookings) == 5
    assert date_remaining(d2, bookings) == 3


def test_bus_package_without_dates_is_not_full():
    package = SimpleNamespace(max_people=40, by_bus=True)

    summary = summarize_package(package, bookings=[], dates=[])

    assert summary.no_dates_set
    assert summary.as_dict()["dates"] == []


def test_summary_flags_full_occurrences():
    package = SimpleNamespace(max_people=40, by_bus=True)
    d1 = _date(1, date(2030, 5, 1), 2)
    d2 = _date(2, date(2030, 5, 8), 2)

    summary = summarize_package(package, bookings=[_booking(2, package_date_id=1)], dates=[d1, d2])
    dates = summary.as_dict()["dates"]

    assert not summary.no_dates_set
    assert [item["is_available"] for item in dates] == [False, True]


def test_capacity_for_bus_tour_needs_a_date():
    package = SimpleNamespace(max_people=40, by_bus=True)

    assert capacity_for(package, None, []) is None
