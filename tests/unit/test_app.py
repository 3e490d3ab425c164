from app import create_app
from booking.booking_service import BookingService


def _build(tmp_path):
    return create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'config.db'}"})


# bad integers fall back to the defaults
def test_invalid_attempt_counts_use_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("BOOKING_RESERVE_ATTEMPTS", "abc")
    monkeypatch.setenv("BOOKING_RELEASE_ATTEMPTS", "")
    app = _build(tmp_path)

    assert app.config["BOOKING_RESERVE_ATTEMPTS"] == 3
    assert app.config["BOOKING_RELEASE_ATTEMPTS"] == 3
    service = BookingService.from_config(app.config)
    assert service.guard.reserve_attempts == 3
    assert service.guard.release_attempts == 3


def test_attempt_counts_read_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("BOOKING_RESERVE_ATTEMPTS", "5")
    monkeypatch.setenv("BOOKING_RELEASE_ATTEMPTS", "7")
    app = _build(tmp_path)

    assert app.config["BOOKING_RESERVE_ATTEMPTS"] == 5
    assert app.config["BOOKING_RELEASE_ATTEMPTS"] == 7


def test_verify_movie_flag(tmp_path, monkeypatch):
    monkeypatch.delenv("BOOKING_VERIFY_MOVIE", raising=False)
    assert _build(tmp_path).config["BOOKING_VERIFY_MOVIE"] is False

    for value in ("1", "true", " Yes ", "ON"):
        monkeypatch.setenv("BOOKING_VERIFY_MOVIE", value)
        assert _build(tmp_path).config["BOOKING_VERIFY_MOVIE"] is True

    monkeypatch.setenv("BOOKING_VERIFY_MOVIE", "maybe")
    assert _build(tmp_path).config["BOOKING_VERIFY_MOVIE"] is False
