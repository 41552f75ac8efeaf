# Overview: Request decorators shared by API routes.

from functools import wraps
from flask import current_app, jsonify

from .validation import ValidationError
from .services.reporting_service import ReportError


def json_errors(action: str):
    """
    Map exceptions raised by a route to JSON error responses.

    - ValidationError -> 400 with per-field errors
    - ReportError     -> 400
    - anything else   -> 500, logged with traceback, no detail in the body

    `action` completes the log line "Failed to <action>".
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return jsonify(e.to_dict()), 400
            except ReportError as e:
                return jsonify({"error": str(e)}), 400
            except Exception:
                current_app.logger.exception("Failed to %s", action)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator
