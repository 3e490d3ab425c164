class BookingError(Exception):
    """Base class for booking failures."""


class SeatConflictError(BookingError):
    """Raised when some requested seats are already claimed for the slot."""

    def __init__(self, seats):
        self.seats = list(seats)
        super().__init__(f"Seats already booked: {', '.join(self.seats)}")


class StorageError(BookingError):
    """Raised when the database could not complete a read or write."""


class BookingNotFoundError(BookingError):
    """Raised when no booking has been stored yet."""
