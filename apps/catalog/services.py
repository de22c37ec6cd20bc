import logging

from django.db import transaction

from .models import PackageDate

logger = logging.getLogger(__name__)


class DatesInUseError(Exception):
    """Raised when replacing dates that bookings already point at."""


@transaction.atomic
def replace_package_dates(package, dates):
    """
    Replace every date occurrence of a package with ``dates``.

    This is a full replace, not an upsert. Occurrences that bookings
    reference cannot be dropped, so the whole replace is refused instead.
    """
    existing = PackageDate.objects.select_for_update().filter(package=package)
    if PackageDate.objects.filter(package=package, bookings__isnull=False).exists():
        raise DatesInUseError('Dates that already have bookings cannot be replaced')

    removed = len(list(existing))
    existing.delete()
    created = [
        PackageDate.objects.create(
            package=package,
            start_date=item['start_date'],
            end_date=item['end_date'],
            max_people=item.get('max_people') or 1,
        )
        for item in dates
    ]
    logger.info(
        "Replaced dates for package %s: %s removed, %s created",
        package.pk,
        removed,
        len(created),
    )
    return sorted(created, key=lambda item: (item.start_date, item.pk))
