"""
Field and cross-field rules for a booking candidate.

Validation never raises: callers get a ``ValidationResult`` with a flat
``{field: message}`` map and decide whether to block the submission.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from django.conf import settings
from rest_framework import serializers
from rest_framework.fields import SkipField, empty

from .availability import capacity_for

NAME_REGEX = r"^[A-Za-z\s\-']+$"
ID_NUMBER_REGEX = r'^\d{11}$'
GEORGIAN_PHONE_RE = re.compile(r'^(\+995|995)?[5-9]\d{8}$')
PHONE_SEPARATORS_RE = re.compile(r'[\s\-()]')

# Booking columns the form rules apply to.
CANDIDATE_FIELDS = ('name', 'email', 'phone', 'id_number', 'adults', 'children', 'total_price')

# Every field a booking form shows, in display order.
BOOKING_FIELDS = (
    'package',
    'package_date',
    'name',
    'email',
    'phone',
    'id_number',
    'adults',
    'children',
    'total_price',
    'seat',
    'discount_code',
)


@dataclass
class ValidationResult:
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


class BookingCandidateSerializer(serializers.Serializer):
    name = serializers.RegexField(
        NAME_REGEX,
        min_length=2,
        max_length=100,
        error_messages={
            'required': 'Name is required',
            'blank': 'Name is required',
            'min_length': 'Name must be at least 2 characters',
            'max_length': 'Name must be less than 100 characters',
            'invalid': 'Name can only contain letters, spaces, hyphens, and apostrophes',
        },
    )
    email = serializers.EmailField(
        max_length=254,
        error_messages={
            'required': 'Email is required',
            'blank': 'Email is required',
            'invalid': 'Please enter a valid email address',
        },
    )
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    id_number = serializers.RegexField(
        ID_NUMBER_REGEX,
        error_messages={
            'required': 'ID number is required',
            'blank': 'ID number is required',
            'invalid': 'ID number must be exactly 11 digits',
        },
    )
    adults = serializers.IntegerField(
        min_value=1,
        max_value=settings.BOOKING_MAX_ADULTS,
        error_messages={
            'required': 'At least 1 adult is required',
            'min_value': 'At least 1 adult is required',
            'max_value': f'Maximum {settings.BOOKING_MAX_ADULTS} adults allowed',
            'invalid': 'Number of adults must be a whole number',
        },
    )
    children = serializers.IntegerField(
        required=False,
        default=0,
        min_value=0,
        max_value=settings.BOOKING_MAX_CHILDREN,
        error_messages={
            'min_value': 'Number of children cannot be negative',
            'max_value': f'Maximum {settings.BOOKING_MAX_CHILDREN} children allowed',
            'invalid': 'Number of children must be a whole number',
        },
    )
    total_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        error_messages={
            'required': 'Total price is required',
            'invalid': 'Total price must be a number',
        },
    )

    def validate_email(self, value):
        return value.strip().lower()

    def validate_phone(self, value):
        cleaned = PHONE_SEPARATORS_RE.sub('', value or '')
        if cleaned and not GEORGIAN_PHONE_RE.match(cleaned):
            raise serializers.ValidationError(
                'Please enter a valid Georgian phone number (e.g., +995 5XX XXX XXX or 5XX XXX XXX)'
            )
        return cleaned

    def validate_total_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Total price must be positive')
        return value


def flatten_errors(errors) -> Dict[str, str]:
    """Keep the first message per field, the way the form displays them."""
    flat = {}
    for key, messages in errors.items():
        if isinstance(messages, (list, tuple)):
            flat[key] = str(messages[0]) if messages else ''
        elif isinstance(messages, dict):
            flat[key] = str(next(iter(messages.values()), ''))
        else:
            flat[key] = str(messages)
    return flat


def _clean_field(serializer, name, data):
    try:
        return serializer.fields[name].run_validation(data.get(name, empty))
    except (serializers.ValidationError, SkipField):
        return None


def clean_travelers(data: Dict[str, Any]):
    """
    Adults and children parsed with the booking form rules, or None when
    either count is invalid.
    """
    serializer = BookingCandidateSerializer()
    adults = _clean_field(serializer, 'adults', data)
    children = _clean_field(serializer, 'children', data)
    if adults is None or children is None:
        return None
    return adults, children


def capacity_error(total: int, availability, by_bus: bool) -> str:
    scope = 'date' if by_bus else 'package'
    return (
        f'Total travelers ({total}) exceeds the places left for this {scope} '
        f'({max(availability.remaining, 0)} of maximum {availability.capacity})'
    )


def validate_booking(
    data: Dict[str, Any],
    package=None,
    package_date=None,
    bookings: Optional[Iterable] = None,
) -> ValidationResult:
    serializer = BookingCandidateSerializer(data=data)
    serializer.is_valid()
    errors = flatten_errors(serializer.errors)

    if package is None:
        errors.setdefault('package', 'Please select a package')
    elif package.by_bus:
        if package_date is None:
            errors.setdefault('package', 'Please select a travel date for this bus tour')
        elif package_date.package_id != package.pk:
            errors['package_date'] = 'Selected date does not belong to this package'
            package_date = None
    else:
        package_date = None

    if package is not None and 'adults' not in errors and 'children' not in errors:
        adults = _clean_field(serializer, 'adults', data)
        children = _clean_field(serializer, 'children', data) or 0
        if bookings is None:
            bookings = package.bookings.all()
        availability = capacity_for(package, package_date, bookings)
        total = adults + children
        if availability is not None and not availability.fits(total):
            errors['adults'] = capacity_error(total, availability, package.by_bus)

    if errors:
        return ValidationResult(success=False, errors=errors)

    cleaned = dict(serializer.validated_data)
    cleaned['package'] = package
    cleaned['package_date'] = package_date
    return ValidationResult(success=True, data=cleaned)
