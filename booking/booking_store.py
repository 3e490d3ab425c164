from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from booking.errors import BookingNotFoundError, StorageError
from booking.seat_guard import Grant
from models import CLAIM_BOOKED, Booking, SeatClaim, db, utcnow


class BookingStore:
    """Durable booking records. Writes only go through a guard-issued Grant."""

    def append(self, grant: Grant) -> Booking:
        try:
            booking = Booking(movie=grant.movie, slot=grant.slot, created_at=utcnow())
            db.session.add(booking)
            db.session.flush()
            booking_id = booking.id
            # stamped only once the insert holds the write lock
            booking.created_at = self._next_timestamp(booking_id)

            linked = SeatClaim.query.filter(
                SeatClaim.id.in_(grant.claim_ids),
                SeatClaim.booking_id.is_(None),
            ).update({"booking_id": booking_id, "status": CLAIM_BOOKED}, synchronize_session=False)
            if linked != len(grant.claim_ids):
                db.session.rollback()
                raise StorageError(
                    f"Seat claims for {grant.movie} at {grant.slot} changed before the booking was saved"
                )

            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError("Failed to save booking") from exc

        logger.info("Booking {} saved: {} at {} seats {}", booking_id, grant.movie, grant.slot, list(grant.seats))
        return booking

    def latest(self) -> Booking:
        try:
            booking = Booking.query.order_by(Booking.created_at.desc(), Booking.id.desc()).first()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError("Failed to read bookings") from exc

        if booking is None:
            raise BookingNotFoundError("No booking found")
        return booking

    def _next_timestamp(self, booking_id):
        # never earlier than the newest other booking
        now = utcnow()
        newest = (
            db.session.query(Booking.created_at)
            .filter(Booking.id != booking_id)
            .order_by(Booking.created_at.desc())
            .with_for_update()
            .first()
        )
        if newest is not None and newest.created_at > now:
            return newest.created_at
        return now
