from loguru import logger
from marshmallow import ValidationError

from booking.booking_store import BookingStore
from booking.errors import StorageError
from booking.seat_guard import SeatInventoryGuard
from models import Booking, Movie
from schemas import booking_request_schema


class BookingService:
    """Validate, claim seats, then record the booking.

    Each call is independent; the only shared state is the seat claim table
    owned by the guard.
    """

    def __init__(self, guard=None, store=None, schema=None, verify_movie=False):
        self.guard = guard or SeatInventoryGuard()
        self.store = store or BookingStore()
        self.schema = schema or booking_request_schema
        self.verify_movie = verify_movie

    @classmethod
    def from_config(cls, config):
        guard = SeatInventoryGuard(
            reserve_attempts=config.get("BOOKING_RESERVE_ATTEMPTS", 3),
            release_attempts=config.get("BOOKING_RELEASE_ATTEMPTS", 3),
        )
        return cls(guard=guard, verify_movie=config.get("BOOKING_VERIFY_MOVIE", False))

    def create_booking(self, payload) -> Booking:
        request = self.schema.load(payload)

        if self.verify_movie and Movie.query.filter_by(imdb_id=request["movie"]).first() is None:
            raise ValidationError({"movie": ["Unknown movie."]})

        grant = self.guard.reserve(request["movie"], request["slot"], request["seats"])
        try:
            return self.store.append(grant)
        except StorageError:
            logger.warning("Booking for {} at {} not saved, releasing seats", grant.movie, grant.slot)
            self.guard.release(grant)
            raise

    def get_last_booking(self) -> Booking:
        return self.store.latest()
