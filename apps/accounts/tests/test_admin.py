"""User admin layout."""

from __future__ import annotations

from django.test import SimpleTestCase

from apps.accounts.admin import UserAdmin


class UserAdminTests(SimpleTestCase):
    def test_role_fieldsets(self) -> None:
        for fieldsets in (UserAdmin.fieldsets, UserAdmin.add_fieldsets):
            sections = dict(fieldsets)

            self.assertNotIn("Agency", sections)
            self.assertIn("role", sections["Role"]["fields"])
            self.assertIn("phone_number", sections["Role"]["fields"])
