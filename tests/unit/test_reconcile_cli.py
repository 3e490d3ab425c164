from booking.seat_guard import SeatInventoryGuard
from models import CLAIM_RECONCILE, SeatClaim, db

SLOT = "2024-01-01T18:00"


def _flag(grant):
    SeatClaim.query.filter(SeatClaim.id.in_(grant.claim_ids)).update({"status": CLAIM_RECONCILE})
    db.session.commit()


def test_reconcile_nothing_flagged(app):
    result = app.test_cli_runner().invoke(args=["reconcile-seats"])

    assert result.exit_code == 0
    assert "No seat claims need reconciliation." in result.output


def test_reconcile_lists_flagged_claims(app):
    _flag(SeatInventoryGuard().reserve("m1", SLOT, ["A1"]))

    result = app.test_cli_runner().invoke(args=["reconcile-seats"])

    assert result.exit_code == 0
    assert f"m1 | {SLOT} | A1" in result.output
    assert SeatClaim.query.count() == 1


def test_reconcile_release(app):
    _flag(SeatInventoryGuard().reserve("m1", SLOT, ["A1", "A2"]))

    result = app.test_cli_runner().invoke(args=["reconcile-seats", "--release"])

    assert result.exit_code == 0
    assert "Released 2 seat claim(s)." in result.output
    db.session.expire_all()
    assert SeatClaim.query.count() == 0
