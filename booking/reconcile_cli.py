import click
from flask import current_app
from flask.cli import with_appcontext

from booking.seat_guard import SeatInventoryGuard


@click.command("reconcile-seats")
@click.option("--release", is_flag=True, help="Delete flagged claims that never became bookings.")
@with_appcontext
def reconcile_seats_command(release):
    """List seat claims whose release failed and, optionally, free them."""
    guard = SeatInventoryGuard(release_attempts=current_app.config.get("BOOKING_RELEASE_ATTEMPTS", 3))

    flagged = guard.flagged_claims()
    if not flagged:
        click.echo("No seat claims need reconciliation.")
        return

    for claim in flagged:
        click.echo(f"{claim.movie} | {claim.slot} | {claim.seat} | claimed {claim.claimed_at.isoformat()}")

    if release:
        released = guard.release_flagged()
        click.echo(f"Released {released} seat claim(s).")
