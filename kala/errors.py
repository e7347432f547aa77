import logging
from enum import Enum

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL_ERROR = "internal_error"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.CONFLICT: 409,
    ErrorType.INTERNAL_ERROR: 500,
}


class AppException(Exception):
    """Custom exception that services and views can raise."""

    def __init__(self, error_type: ErrorType, message: str, details=None):
        self.error_type = error_type
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_type, 500)


def form_error(form) -> AppException:
    """Build a validation error out of a failed WTForms form."""
    message = "Invalid request"
    for field_name, errors in form.errors.items():
        if errors:
            label = getattr(form, field_name).name
            message = f"{label}: {errors[0]}"
            break
    return AppException(ErrorType.VALIDATION, message, details=form.errors)


def register_error_handlers(app, db):
    @app.errorhandler(AppException)
    def handle_app_exception(exc):
        body = {"error": exc.message}
        if exc.details:
            body["errors"] = exc.details
        return jsonify(body), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return jsonify({"error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        db.session.rollback()
        logger.exception("Unhandled exception: %s", exc)
        return jsonify({"error": "Internal server error"}), 500
