import os

from dotenv import load_dotenv
from flask import Flask

from booking.reconcile_cli import reconcile_seats_command
from logger_config import configure_logging
from models import db
from routes.booking_routes import booking_bp

load_dotenv()


def _int_env(name, default):
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _flag_env(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def create_app(test_config=None):
    app = Flask(__name__)
    # Configure Database
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///bookings.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "dev")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    app.config["LOG_FILE"] = os.getenv("LOG_FILE")
    app.config["BOOKING_RESERVE_ATTEMPTS"] = _int_env("BOOKING_RESERVE_ATTEMPTS", 3)
    app.config["BOOKING_RELEASE_ATTEMPTS"] = _int_env("BOOKING_RELEASE_ATTEMPTS", 3)
    app.config["BOOKING_VERIFY_MOVIE"] = _flag_env("BOOKING_VERIFY_MOVIE")

    if test_config:
        app.config.update(test_config)

    configure_logging(app.config["LOG_LEVEL"], app.config["LOG_FILE"])

    db.init_app(app)
    app.register_blueprint(booking_bp)
    app.cli.add_command(reconcile_seats_command)

    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    create_app().run(debug=True)
