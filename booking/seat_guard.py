"""Atomic seat claims backed by the unique (movie, slot, seat) index."""

import time
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from booking.errors import SeatConflictError, StorageError
from models import CLAIM_HELD, CLAIM_RECONCILE, SeatClaim, db


@dataclass(frozen=True)
class Grant:
    movie: str
    slot: str
    seats: Tuple[str, ...]
    claim_ids: Tuple[int, ...]


class SeatInventoryGuard:
    def __init__(self, reserve_attempts: int = 3, release_attempts: int = 3, release_backoff: float = 0.05):
        self.reserve_attempts = max(1, reserve_attempts)
        self.release_attempts = max(1, release_attempts)
        self.release_backoff = release_backoff

    def reserve(self, movie: str, slot: str, seats: Sequence[str]) -> Grant:
        """Claim every seat for the slot in one transaction, or none of them.

        Raises SeatConflictError listing the requested seats that are already
        claimed, and StorageError when the database fails.
        """
        seats = list(seats)
        for attempt in range(1, self.reserve_attempts + 1):
            claims = [SeatClaim(movie=movie, slot=slot, seat=seat, status=CLAIM_HELD) for seat in seats]
            try:
                db.session.add_all(claims)
                db.session.flush()
                claim_ids = tuple(claim.id for claim in claims)
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                occupied = self.occupied_seats(movie, slot, seats)
                if occupied:
                    logger.info("Seats {} for {} at {} already booked", occupied, movie, slot)
                    raise SeatConflictError(occupied)
                # the holder released between our insert and the lookup
                logger.debug(
                    "Claim for {} at {} collided with a released hold (attempt {}/{})",
                    movie, slot, attempt, self.reserve_attempts,
                )
                continue
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StorageError("Could not claim seats") from exc

            logger.debug("Claimed seats {} for {} at {}", seats, movie, slot)
            return Grant(movie=movie, slot=slot, seats=tuple(seats), claim_ids=claim_ids)

        raise StorageError(f"Could not settle seat claim after {self.reserve_attempts} attempts")

    def occupied_seats(self, movie: str, slot: str, seats: Sequence[str]) -> List[str]:
        try:
            taken = {
                claim.seat
                for claim in SeatClaim.query.filter(
                    SeatClaim.movie == movie,
                    SeatClaim.slot == slot,
                    SeatClaim.seat.in_(list(seats)),
                )
            }
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError("Could not read seat claims") from exc
        return [seat for seat in seats if seat in taken]

    def release(self, grant: Grant) -> bool:
        """Drop the grant's unrecorded claims so the seats can be booked again.

        Returns False when every attempt failed; the claims are then flagged
        for reconciliation and stay unavailable.
        """
        for attempt in range(1, self.release_attempts + 1):
            try:
                self._release_once(grant)
            except SQLAlchemyError:
                db.session.rollback()
                logger.warning(
                    "Releasing seats {} for {} at {} failed (attempt {}/{})",
                    list(grant.seats), grant.movie, grant.slot, attempt, self.release_attempts,
                )
                if attempt < self.release_attempts and self.release_backoff:
                    time.sleep(self.release_backoff * attempt)
                continue
            logger.info("Released seats {} for {} at {}", list(grant.seats), grant.movie, grant.slot)
            return True

        self._flag_for_reconciliation(grant)
        return False

    def _release_once(self, grant: Grant):
        SeatClaim.query.filter(
            SeatClaim.id.in_(grant.claim_ids),
            SeatClaim.booking_id.is_(None),
        ).delete(synchronize_session=False)
        db.session.commit()

    def _flag_for_reconciliation(self, grant: Grant):
        logger.critical(
            "Seats {} for {} at {} could not be released; flagged for reconciliation",
            list(grant.seats), grant.movie, grant.slot,
        )
        try:
            SeatClaim.query.filter(
                SeatClaim.id.in_(grant.claim_ids),
                SeatClaim.booking_id.is_(None),
            ).update({"status": CLAIM_RECONCILE}, synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.opt(exception=True).critical("Could not flag claims {} for reconciliation", list(grant.claim_ids))

    def flagged_claims(self) -> List[SeatClaim]:
        return (
            SeatClaim.query.filter_by(status=CLAIM_RECONCILE)
            .order_by(SeatClaim.movie, SeatClaim.slot, SeatClaim.id)
            .all()
        )

    def release_flagged(self) -> int:
        released = SeatClaim.query.filter(
            SeatClaim.status == CLAIM_RECONCILE,
            SeatClaim.booking_id.is_(None),
        ).delete(synchronize_session=False)
        db.session.commit()
        return released
