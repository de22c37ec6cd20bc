"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.exceptions import CapacityExceededError
from apps.bookings.models import Booking, Discount, Payment
from apps.bookings.validation import ValidationResult
from apps.catalog.tests.factories import make_customer, make_date, make_operator, make_package


class BookingAPITests(APITestCase):
    def setUp(self) -> None:
        self.operator = make_operator()
        self.package = make_package(price=Decimal("100.00"), max_people=10)
        self.list_url = reverse("booking-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "package": self.package.pk,
            "name": "Giorgi Maisuradze",
            "email": "giorgi@example.com",
            "phone": "+995 599 12 34 56",
            "id_number": "01001011234",
            "adults": 2,
            "children": 1,
        }
        payload.update(overrides)
        return payload

    def test_anyone_can_book(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["total_price"], "250.00")
        self.assertEqual(response.data["payment"]["status"], Payment.STATUS_PENDING)
        self.assertEqual(response.data["payment"]["amount"], "250.00")
        self.assertEqual(response.data["package"]["title"], self.package.title)
        self.assertTrue(response.data["confirmation_code"])

    def test_invalid_form_returns_field_errors(self) -> None:
        response = self.client.post(self.list_url, self._payload(id_number="123"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("id_number", response.data["errors"])
        self.assertEqual(Booking.objects.count(), 0)

    def test_over_capacity_is_rejected(self) -> None:
        response = self.client.post(self.list_url, self._payload(adults=11, children=0), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("adults", response.data["errors"])

    def test_capacity_race_returns_conflict(self) -> None:
        with mock.patch(
            "apps.bookings.services.create_booking",
            side_effect=CapacityExceededError(3, 0, 10),
        ):
            response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("error", response.data)
        self.assertEqual(Booking.objects.count(), 0)
        self.assertEqual(Payment.objects.count(), 0)

    def test_locked_recheck_rejects_overbooking(self) -> None:
        Booking.objects.create(
            package=self.package,
            name="Early Bird",
            email="early@example.com",
            id_number="01001011234",
            adults=9,
            total_price=Decimal("900.00"),
        )
        with mock.patch("apps.bookings.submission.validate_booking") as validate:
            validate.return_value = ValidationResult(
                success=True,
                data={
                    "package": self.package,
                    "package_date": None,
                    "name": "Late",
                    "email": "late@example.com",
                    "phone": "",
                    "id_number": "01001011234",
                    "adults": 2,
                    "children": 0,
                    "total_price": Decimal("200.00"),
                },
            )
            response = self.client.post(self.list_url, self._payload(adults=2, children=0), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Booking.objects.count(), 1)

    def test_listing_requires_operator(self) -> None:
        anonymous = self.client.get(self.list_url)
        self.client.force_authenticate(make_customer())
        customer = self.client.get(self.list_url)

        self.assertEqual(anonymous.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(customer.status_code, status.HTTP_403_FORBIDDEN)

    def test_operator_lists_bookings(self) -> None:
        self.client.post(self.list_url, self._payload(), format="json")
        self.client.force_authenticate(self.operator)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["name"], "Giorgi Maisuradze")

    def test_delete_removes_payment_first(self) -> None:
        created = self.client.post(self.list_url, self._payload(), format="json")
        self.client.force_authenticate(self.operator)

        response = self.client.delete(reverse("booking-detail", args=[created.data["id"]]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(Booking.objects.count(), 0)
        self.assertEqual(Payment.objects.count(), 0)

    def test_editing_total_updates_pending_payment(self) -> None:
        created = self.client.post(self.list_url, self._payload(), format="json")
        self.client.force_authenticate(self.operator)

        response = self.client.patch(
            reverse("booking-detail", args=[created.data["id"]]),
            {"total_price": "199.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["payment"]["amount"], "199.00")

    def test_client_total_is_replaced_for_decimal_counts(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(adults=2.0, children=0, total_price="0.01"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["total_price"], "200.00")
        self.assertEqual(response.data["payment"]["amount"], "200.00")

    def test_operator_edit_runs_booking_rules(self) -> None:
        package = make_package(max_people=3)
        created = self.client.post(self.list_url, self._payload(package=package.pk, adults=1, children=0), format="json")
        self.client.force_authenticate(self.operator)

        response = self.client.patch(
            reverse("booking-detail", args=[created.data["id"]]),
            {"adults": 15, "id_number": "abc", "name": "R2-D2"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("adults", response.data)
        self.assertIn("id_number", response.data)
        self.assertIn("name", response.data)
        booking = Booking.objects.get(pk=created.data["id"])
        self.assertEqual(booking.adults, 1)
        self.assertEqual(booking.name, "Giorgi Maisuradze")

    def test_operator_edit_does_not_count_the_booking_twice(self) -> None:
        package = make_package(max_people=3)
        created = self.client.post(self.list_url, self._payload(package=package.pk, adults=2, children=0), format="json")
        self.client.force_authenticate(self.operator)

        response = self.client.patch(
            reverse("booking-detail", args=[created.data["id"]]),
            {"adults": 3, "phone": "599-12-34-56"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["adults"], 3)
        self.assertEqual(response.data["phone"], "599123456")

    def test_confirmation_lookup_is_public(self) -> None:
        created = self.client.post(self.list_url, self._payload(), format="json")
        code = created.data["confirmation_code"]

        response = self.client.get(reverse("booking-confirmation", args=[code.lower()]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["confirmation_code"], code)
        self.assertEqual(response.data["payment_status"], Payment.STATUS_PENDING)
        self.assertNotIn("id_number", response.data)


class QuoteAPITests(APITestCase):
    def setUp(self) -> None:
        self.package = make_package(price=Decimal("100.00"), by_bus=True)
        self.occurrence = make_date(self.package, max_people=5)
        self.url = reverse("booking-quote")

    def test_quote_matches_price_formula(self) -> None:
        response = self.client.post(
            self.url,
            {"package": self.package.pk, "package_date": self.occurrence.pk, "adults": 2, "children": 1, "seat_selected": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_price"], "300.00")
        self.assertEqual(response.data["availability"]["remaining"], 5)
        self.assertTrue(response.data["fits"])

    def test_quote_applies_discount(self) -> None:
        Discount.objects.create(code="SPRING", amount=Decimal("25.00"), expires_at=timezone.now() + timedelta(days=3))

        response = self.client.post(
            self.url,
            {"package": self.package.pk, "package_date": self.occurrence.pk, "adults": 1, "discount_code": "spring"},
            format="json",
        )

        self.assertEqual(response.data["subtotal"], "100.00")
        self.assertEqual(response.data["total_price"], "75.00")

    def test_quote_without_date_has_no_availability(self) -> None:
        response = self.client.post(self.url, {"package": self.package.pk, "adults": 1}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["availability"])

    def test_quote_requires_an_adult(self) -> None:
        response = self.client.post(self.url, {"package": self.package.pk, "adults": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("adults", response.data)

    def test_quote_rejects_too_many_children(self) -> None:
        response = self.client.post(self.url, {"package": self.package.pk, "adults": 1, "children": 50}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("children", response.data)


class DashboardAPITests(APITestCase):
    def test_dashboard_totals(self) -> None:
        package = make_package(max_people=10)
        for adults, total in ((2, "200.00"), (1, "150.50")):
            Booking.objects.create(
                package=package,
                name="Guest",
                email="guest@example.com",
                id_number="01001011234",
                adults=adults,
                total_price=Decimal(total),
            )
        self.client.force_authenticate(make_operator())

        response = self.client.get(reverse("dashboard"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["totals"]["packages"], 1)
        self.assertEqual(response.data["totals"]["bookings"], 2)
        self.assertEqual(response.data["totals"]["revenue"], "350.50")
        self.assertEqual(response.data["packages"][0]["availability"]["remaining"], 7)

    def test_dashboard_is_operator_only(self) -> None:
        self.client.force_authenticate(make_customer())

        response = self.client.get(reverse("dashboard"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
