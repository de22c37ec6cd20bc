import secrets
import string

from django.db import models
from django.utils import timezone

from apps.catalog.models import Package, PackageDate, Seat


def generate_confirmation_code(length: int = 10) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


class Discount(models.Model):
    code = models.CharField(max_length=40, unique=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    expires_at = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.code

    def is_valid(self, now=None):
        now = now or timezone.now()
        return self.is_active and self.expires_at > now


class Booking(models.Model):
    package = models.ForeignKey(Package, on_delete=models.PROTECT, related_name='bookings')
    package_date = models.ForeignKey(
        PackageDate,
        on_delete=models.PROTECT,
        related_name='bookings',
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    id_number = models.CharField(max_length=11)
    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    seat = models.OneToOneField(
        Seat,
        on_delete=models.SET_NULL,
        related_name='booking',
        null=True,
        blank=True,
    )
    seat_selected = models.BooleanField(default=False)
    discount = models.ForeignKey(
        Discount,
        on_delete=models.SET_NULL,
        related_name='bookings',
        null=True,
        blank=True,
    )
    confirmation_code = models.CharField(max_length=20, unique=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        if not self.confirmation_code:
            self.confirmation_code = generate_confirmation_code()
        super().save(*args, **kwargs)

    def __str__(self):
        return f'{self.name} - {self.package} ({self.confirmation_code})'

    @property
    def travelers(self):
        return self.adults + self.children


class Payment(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_PAID = 'paid'
    STATUS_FAILED = 'failed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PAID, 'Paid'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    booking = models.OneToOneField(Booking, on_delete=models.CASCADE, related_name='payment')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.booking.confirmation_code} - {self.amount} ({self.status})'
