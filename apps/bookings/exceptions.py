class BookingError(Exception):
    """Base error for booking operations that cannot complete."""


class CapacityExceededError(BookingError):
    """The package or date occurrence filled up before the booking was written."""

    def __init__(self, requested, remaining, capacity):
        self.requested = requested
        self.remaining = remaining
        self.capacity = capacity
        super().__init__(
            f"Only {max(remaining, 0)} of {capacity} places are left; {requested} requested."
        )


class SeatUnavailableError(BookingError):
    """The selected seat was taken by another booking."""


class SubmissionInProgressError(BookingError):
    """A submission is already being written for this form."""
