"""
Booking submission flow.

One ``BookingSubmission`` is the server-side twin of the booking form:

    IDLE -> VALIDATING -> SUBMITTING -> SUCCEEDED
                 |             |
                 +--> FAILED <-+

A failed submission can be retried by calling ``submit`` again. Only one
write may be in flight per submission.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from django.db import DatabaseError
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.catalog.models import Package, PackageDate, Seat

from . import services
from .exceptions import BookingError, CapacityExceededError, SeatUnavailableError, SubmissionInProgressError
from .models import Discount
from .pricing import quote_for
from .validation import BOOKING_FIELDS, clean_travelers, validate_booking

logger = logging.getLogger(__name__)

GENERAL_ERROR_MESSAGE = 'An error occurred while creating your booking. Please try again.'


class SubmissionState(str, Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    SUBMITTING = 'submitting'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


class FailureReason(str, Enum):
    VALIDATION = 'validation'
    CONFLICT = 'conflict'
    ERROR = 'error'


@dataclass
class References:
    package: Optional[Package] = None
    package_date: Optional[PackageDate] = None
    seat: Optional[Seat] = None
    discount: Optional[Discount] = None


def _whole_number(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _lookup(queryset, value):
    """Return (instance, invalid) for a primary key coming from the form."""
    if value in (None, '', 0, '0'):
        return None, False
    pk = _whole_number(value)
    if pk is None:
        return None, True
    instance = queryset.filter(pk=pk).first()
    return instance, instance is None


def resolve_references(data: Dict[str, Any]):
    refs = References()
    errors = {}

    refs.package, invalid = _lookup(Package.objects.all(), data.get('package'))
    if invalid:
        errors['package'] = 'Selected package does not exist'

    refs.package_date, invalid = _lookup(PackageDate.objects.all(), data.get('package_date'))
    if invalid:
        errors['package_date'] = 'Selected date does not exist'

    seat, invalid = _lookup(Seat.objects.select_related('bus'), data.get('seat'))
    if invalid:
        errors['seat'] = 'Selected seat does not exist'
    elif seat is not None and refs.package is not None:
        if seat.bus.package_id != refs.package.pk:
            errors['seat'] = 'Selected seat does not belong to this package'
        elif seat.is_taken:
            errors['seat'] = f'Seat {seat.number} is already taken'
        else:
            refs.seat = seat

    code = (data.get('discount_code') or '').strip()
    if code:
        discount = Discount.objects.filter(code__iexact=code).first()
        if discount is None or not discount.is_valid():
            errors['discount_code'] = 'Discount code is invalid or expired'
        else:
            refs.discount = discount

    return refs, errors


def resolve_travel_dates(package, package_date, data: Dict[str, Any]):
    """
    Start/end dates copied onto the booking: the chosen occurrence for bus
    tours, the package's own range when it has one, otherwise what the
    customer asked for (today when nothing was given).
    """
    if package_date is not None:
        return package_date.start_date, package_date.end_date, {}
    if package is not None and package.has_fixed_dates:
        return package.start_date, package.end_date, {}

    errors = {}
    parsed = {}
    for key in ('start_date', 'end_date'):
        raw = data.get(key)
        if not raw:
            parsed[key] = None
            continue
        try:
            value = parse_date(str(raw)[:10])
        except ValueError:
            value = None
        if value is None:
            errors[key] = 'Enter a valid date (YYYY-MM-DD)'
        parsed[key] = value

    start = parsed['start_date'] or timezone.localdate()
    end = parsed['end_date']
    if end is not None and end < start:
        errors['end_date'] = 'End date cannot be before the start date'
    return start, end, errors


def seat_selected(data: Dict[str, Any], refs: References) -> bool:
    return bool(data.get('seat_selected')) or refs.seat is not None


def server_total(package, adults: int, children: int, data: Dict[str, Any], refs: References):
    return quote_for(
        package,
        adults,
        children,
        seat_selected=seat_selected(data, refs),
        discount=refs.discount,
    )


def build_candidate(data: Dict[str, Any], refs: References) -> Dict[str, Any]:
    """
    Form data with the total price replaced by the server's quote. The
    client's own total is never kept; when the counts are invalid the
    candidate carries no total at all.
    """
    candidate = {key: value for key, value in data.items() if key != 'total_price'}
    travelers = clean_travelers(data)
    if refs.package is not None and travelers is not None:
        candidate['total_price'] = server_total(refs.package, *travelers, data, refs)
    return candidate


class BookingSubmission:
    def __init__(self, create: Optional[Callable[[services.BookingPayload], Any]] = None):
        self.create = create or services.create_booking
        self.state = SubmissionState.IDLE
        self.touched = set()
        self.errors: Dict[str, str] = {}
        self.error_message: Optional[str] = None
        self.failure_reason: Optional[FailureReason] = None
        self.payload: Optional[services.BookingPayload] = None
        self.booking = None

    @property
    def can_submit(self) -> bool:
        return self.state != SubmissionState.SUBMITTING

    @property
    def confirmation_code(self) -> Optional[str]:
        if self.booking is None:
            return None
        return self.booking.confirmation_code

    def field_error(self, field: str) -> str:
        if field in self.touched:
            return self.errors.get(field, '')
        return ''

    def submit(self, data: Dict[str, Any]) -> bool:
        if not self.can_submit:
            raise SubmissionInProgressError('A booking is already being submitted')

        self.state = SubmissionState.VALIDATING
        self.touched = set(BOOKING_FIELDS)
        self.errors = {}
        self.error_message = None
        self.failure_reason = None

        refs, errors = resolve_references(data)
        candidate = build_candidate(data, refs)
        result = validate_booking(candidate, refs.package, refs.package_date)

        # Only an occurrence that survived validation may supply travel dates.
        package_date = result.data.get('package_date') if result.success else None
        start_date, end_date, date_errors = resolve_travel_dates(refs.package, package_date, data)

        errors = {**result.errors, **errors, **date_errors}
        if 'total_price' not in candidate:
            errors.pop('total_price', None)
        if errors:
            return self._fail(FailureReason.VALIDATION, errors=errors)

        cleaned = result.data
        children = cleaned.get('children') or 0
        self.payload = services.BookingPayload(
            package=cleaned['package'],
            package_date=cleaned['package_date'],
            name=cleaned['name'],
            email=cleaned['email'],
            phone=cleaned.get('phone') or '',
            id_number=cleaned['id_number'],
            adults=cleaned['adults'],
            children=children,
            total_price=server_total(cleaned['package'], cleaned['adults'], children, data, refs),
            start_date=start_date,
            end_date=end_date,
            seat=refs.seat,
            seat_selected=seat_selected(data, refs),
            discount=refs.discount,
        )

        self.state = SubmissionState.SUBMITTING
        try:
            self.booking = self.create(self.payload)
        except CapacityExceededError as exc:
            return self._fail(FailureReason.CONFLICT, message=str(exc))
        except SeatUnavailableError as exc:
            return self._fail(FailureReason.CONFLICT, message=str(exc), errors={'seat': str(exc)})
        except (BookingError, DatabaseError):
            logger.exception("Booking submission for package %s failed", self.payload.package.pk)
            return self._fail(FailureReason.ERROR, message=GENERAL_ERROR_MESSAGE)
        except Exception:
            self._fail(FailureReason.ERROR, message=GENERAL_ERROR_MESSAGE)
            raise

        self.state = SubmissionState.SUCCEEDED
        return True

    def _fail(self, reason: FailureReason, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None) -> bool:
        self.state = SubmissionState.FAILED
        self.failure_reason = reason
        self.error_message = message
        self.errors = errors or {}
        if reason == FailureReason.VALIDATION:
            logger.info("Booking submission rejected: %s", sorted(self.errors))
        else:
            logger.warning("Booking submission failed (%s): %s", reason.value, message)
        return False
