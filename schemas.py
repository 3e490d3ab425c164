from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate, validates


MOVIE_MAX_LENGTH = 100
SLOT_MAX_LENGTH = 100
SEAT_MAX_LENGTH = 20


class BookingRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    # limits match the column sizes in models.py
    movie = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, error="movie is required."),
            validate.Length(max=MOVIE_MAX_LENGTH, error=f"movie must be at most {MOVIE_MAX_LENGTH} characters."),
        ],
        error_messages={"required": "movie is required."},
    )
    slot = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, error="slot is required."),
            validate.Length(max=SLOT_MAX_LENGTH, error=f"slot must be at most {SLOT_MAX_LENGTH} characters."),
        ],
        error_messages={"required": "slot is required."},
    )
    seats = fields.List(
        fields.Str(
            validate=[
                validate.Length(min=1, error="seat identifiers may not be empty."),
                validate.Length(
                    max=SEAT_MAX_LENGTH, error=f"seat identifiers must be at most {SEAT_MAX_LENGTH} characters."
                ),
            ]
        ),
        required=True,
        validate=validate.Length(min=1, error="seats must contain at least one seat."),
        error_messages={"required": "seats is required."},
    )

    @pre_load
    def strip_identifiers(self, data: Dict[str, Any], **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("movie", "slot"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        seats = data.get("seats")
        if isinstance(seats, list):
            data["seats"] = [seat.strip() if isinstance(seat, str) else seat for seat in seats]
        return data

    @validates("seats")
    def validate_unique_seats(self, value, **kwargs):
        seen = set()
        duplicates = []
        for seat in value:
            if seat in seen and seat not in duplicates:
                duplicates.append(seat)
            seen.add(seat)
        if duplicates:
            raise ValidationError(f"Duplicate seats: {', '.join(duplicates)}")


class BookingSchema(Schema):
    id = fields.Int()
    movie = fields.Str()
    slot = fields.Str()
    seats = fields.List(fields.Str())
    created_at = fields.DateTime(data_key="createdAt")


booking_request_schema = BookingRequestSchema()
booking_schema = BookingSchema()


def flatten_errors(messages, prefix=""):
    """Turn marshmallow's nested error messages into a flat list of {field, msg}."""
    errors = []
    if isinstance(messages, dict):
        for field, nested in messages.items():
            name = f"{prefix}.{field}" if prefix else str(field)
            errors.extend(flatten_errors(nested, name))
    elif isinstance(messages, (list, tuple)):
        for message in messages:
            if isinstance(message, (dict, list, tuple)):
                errors.extend(flatten_errors(message, prefix))
            else:
                errors.append({"field": prefix, "msg": message})
    else:
        errors.append({"field": prefix, "msg": messages})
    return errors
