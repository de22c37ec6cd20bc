from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_ADMIN = 'admin'
    ROLE_OPERATOR = 'operator'
    ROLE_CUSTOMER = 'customer'

    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_OPERATOR, 'Operator'),
        (ROLE_CUSTOMER, 'Customer'),
    ]

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    def is_operator(self):
        return self.role == self.ROLE_OPERATOR

    def is_customer(self):
        return self.role == self.ROLE_CUSTOMER

    def can_manage_catalog(self):
        """Check if user can create, update, or delete packages, bookings and payments."""
        if self.is_staff or self.is_superuser:
            return True
        return self.role in [self.ROLE_ADMIN, self.ROLE_OPERATOR]

    class Meta:
        db_table = 'users'
