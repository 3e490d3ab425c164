from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

CLAIM_HELD = "held"
CLAIM_BOOKED = "booked"
CLAIM_RECONCILE = "reconcile"


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Booking(db.Model):
    __tablename__ = 'bookings'
    id = db.Column(db.Integer, primary_key=True)
    movie = db.Column(db.String(100), nullable=False)
    slot = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, index=True)

    claims = db.relationship("SeatClaim", back_populates="booking", order_by="SeatClaim.id")

    @property
    def seats(self):
        return [claim.seat for claim in self.claims]


class SeatClaim(db.Model):
    __tablename__ = 'seat_claims'
    # one row per (movie, slot, seat); the guard relies on this constraint
    __table_args__ = (
        db.UniqueConstraint('movie', 'slot', 'seat', name='uq_seat_claims_movie_slot_seat'),
    )
    id = db.Column(db.Integer, primary_key=True)
    movie = db.Column(db.String(100), nullable=False)
    slot = db.Column(db.String(100), nullable=False)
    seat = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=CLAIM_HELD)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=True)
    claimed_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    booking = db.relationship("Booking", back_populates="claims")


class Movie(db.Model):
    __tablename__ = 'movies'
    id = db.Column(db.Integer, primary_key=True)
    imdb_id = db.Column(db.String(20), unique=True, nullable=False)
    title = db.Column(db.String(200), nullable=False)
