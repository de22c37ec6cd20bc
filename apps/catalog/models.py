from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .constants import MAX_SEATS_PER_BUS


class Location(models.Model):
    name = models.CharField(max_length=120)
    country = models.CharField(max_length=100)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name}, {self.country}"


class Category(models.Model):
    name = models.CharField(max_length=60, unique=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'categories'

    def __str__(self):
        return self.name


class Company(models.Model):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    logo_url = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'companies'

    def __str__(self):
        return self.name


class Package(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField()
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    sale_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    duration = models.CharField(max_length=60)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    max_people = models.PositiveIntegerField(default=10)
    popular = models.BooleanField(default=False)
    by_bus = models.BooleanField(default=False)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='packages')
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name='packages')
    company = models.ForeignKey(
        Company,
        on_delete=models.SET_NULL,
        related_name='packages',
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def effective_price(self):
        """Price a customer pays per adult: the sale price when one is set."""
        if self.sale_price is not None:
            return self.sale_price
        return self.price

    @property
    def has_fixed_dates(self):
        return self.start_date is not None and self.end_date is not None


class PackageDate(models.Model):
    package = models.ForeignKey(Package, on_delete=models.CASCADE, related_name='dates')
    start_date = models.DateField()
    end_date = models.DateField()
    max_people = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ['start_date', 'id']

    def __str__(self):
        return f"{self.package} ({self.start_date:%Y-%m-%d} - {self.end_date:%Y-%m-%d})"


class GalleryImage(models.Model):
    package = models.ForeignKey(Package, on_delete=models.CASCADE, related_name='gallery')
    url = models.URLField(max_length=500)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.url


class Bus(models.Model):
    name = models.CharField(max_length=100)
    seat_count = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_SEATS_PER_BUS)],
    )
    package = models.ForeignKey(Package, on_delete=models.CASCADE, related_name='buses')

    class Meta:
        ordering = ['id']
        verbose_name_plural = 'buses'

    def __str__(self):
        return f"{self.name} ({self.seat_count} seats)"


class Seat(models.Model):
    bus = models.ForeignKey(Bus, on_delete=models.CASCADE, related_name='seats')
    number = models.CharField(max_length=10)

    class Meta:
        ordering = ['bus', 'id']
        constraints = [
            models.UniqueConstraint(fields=['bus', 'number'], name='unique_seat_number_per_bus'),
        ]

    def __str__(self):
        return f"{self.bus.name} #{self.number}"

    @property
    def is_taken(self):
        return hasattr(self, 'booking')
