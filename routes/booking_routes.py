from flask import Blueprint, current_app, jsonify, request
from loguru import logger
from marshmallow import ValidationError

from booking.booking_service import BookingService
from booking.errors import BookingNotFoundError, SeatConflictError, StorageError
from schemas import booking_schema, flatten_errors

booking_bp = Blueprint("booking_api", __name__)


@booking_bp.route("/booking", methods=["POST"])
def create_booking():
    # add a booking once its seats are claimed
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}

    service = BookingService.from_config(current_app.config)
    try:
        booking = service.create_booking(payload)
    except ValidationError as exc:
        errors = flatten_errors(exc.messages)
        logger.info("Rejected booking payload: {}", errors)
        return jsonify({"message": "Invalid booking payload", "errors": errors}), 400
    except SeatConflictError as exc:
        return jsonify({"message": "Seats already booked", "conflicting_seats": exc.seats}), 409
    except StorageError:
        logger.exception("Failed to save booking")
        return jsonify({"message": "Server Error"}), 500

    return (
        jsonify({"message": "Booking saved successfully", "booking": booking_schema.dump(booking)}),
        201,
    )


@booking_bp.route("/booking/last", methods=["GET"])
def get_last_booking():
    service = BookingService.from_config(current_app.config)
    try:
        booking = service.get_last_booking()
    except BookingNotFoundError:
        return jsonify({"message": "No booking found"}), 404
    except StorageError:
        logger.exception("Failed to read last booking")
        return jsonify({"message": "Server Error"}), 500

    return jsonify(booking_schema.dump(booking)), 200
