class BookingStoreError(RuntimeError):
    """Base class for store-level failures the router knows how to report."""
    pass


class ConflictError(BookingStoreError):
    """Raised when a conditional write is refused by the store."""
    pass


class DuplicateUserError(ConflictError):
    """Raised when the external id or email is already registered."""
    pass


class DuplicateBookingError(ConflictError):
    """Raised when a customer already holds an appointment on that date."""
    pass


class SlotTakenError(ConflictError):
    """Raised when the hour slot already holds an appointment of any status."""
    pass


class DayClosedError(ConflictError):
    """Raised when the date was declared a day off before the booking committed."""
    pass


class DuplicateDayOffError(ConflictError):
    """Raised when the date is already a day off."""
    pass
