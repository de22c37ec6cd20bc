"""Registration, login and current-user endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()


class AuthAPITests(APITestCase):
    password = "Tbilisi#Trip2024"

    def _register(self, **extra) -> dict:
        payload = {
            "username": "nino",
            "email": "nino@example.com",
            "password": self.password,
            "password2": self.password,
            "first_name": "Nino",
            "last_name": "Beridze",
        }
        payload.update(extra)
        return self.client.post(reverse("register"), payload, format="json")

    def test_registration_always_creates_customer(self) -> None:
        response = self._register(role="operator")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        user = User.objects.get(username="nino")
        self.assertEqual(user.role, User.ROLE_CUSTOMER)
        self.assertFalse(user.can_manage_catalog())

    def test_registration_rejects_mismatched_passwords(self) -> None:
        response = self._register(password2="Different#Pass1")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.data)
        self.assertFalse(User.objects.filter(username="nino").exists())

    def test_login_token_carries_role(self) -> None:
        User.objects.create_user(
            username="ops",
            email="ops@agency.ge",
            password=self.password,
            role=User.ROLE_OPERATOR,
        )

        response = self.client.post(reverse("login"), {"username": "ops", "password": self.password}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], User.ROLE_OPERATOR)
        self.assertEqual(token["username"], "ops")

    def test_me_reports_catalog_rights(self) -> None:
        staff = User.objects.create_user(username="staff", password=self.password, is_staff=True)
        self.client.force_authenticate(staff)

        response = self.client.get(reverse("me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["can_manage_catalog"])

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
