from functools import wraps

from flask import request, jsonify

from ..exceptions import BookingError


def json_body(fn):
    """Pass the request's JSON object to the view as `body`; reject anything else."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return jsonify({"error": "Request body must be a JSON object."}), 400
        return fn(*args, body=body, **kwargs)

    return wrapper


def booking_error_response(err: BookingError):
    """Flask error handler: typed service errors become JSON with their HTTP status."""
    return jsonify({"error": err.message}), err.status_code


def pick(data: dict, *keys):
    """First non-None value among `keys` (clients send camelCase or snake_case)."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None
