import logging

from flask import current_app, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from fitdesk.extensions import db

logger = logging.getLogger(__name__)

# Technical message fragment -> message shown to the user
FRIENDLY_MESSAGES = {
    "invalid credentials": "Incorrect email or password",
    "user already registered": "This email is already registered",
    "user not found": "User not found",
    "token has expired": "Your session has expired. Please log in again",
    "unique constraint": "This record already exists",
    "duplicate key value": "This record already exists",
    "foreign key constraint": "This operation cannot be completed",
    "permission denied": "Access denied",
    "timeout": "The request took too long. Please try again",
}
DEFAULT_FRIENDLY_MESSAGE = "Something went wrong. Please try again."


class ApiError(Exception):
    status_code = 400

    def __init__(self, msg, status_code=None, code=None, errors=None):
        super().__init__(msg)
        self.msg = msg
        if status_code is not None:
            self.status_code = status_code
        self.code = code
        self.errors = errors

    def to_dict(self):
        data = {"msg": self.msg}
        if self.code:
            data["code"] = self.code
        if self.errors:
            data["errors"] = self.errors
        return data


class ValidationFailed(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403

    def __init__(self, msg="Unauthorized", **kwargs):
        super().__init__(msg, **kwargs)


class NotFound(ApiError):
    status_code = 404

    def __init__(self, msg="Not found", **kwargs):
        super().__init__(msg, **kwargs)


class ConfirmationRequired(ApiError):
    status_code = 409

    def __init__(self, msg="Deletion must be confirmed", **kwargs):
        kwargs.setdefault("code", "confirmation_required")
        super().__init__(msg, **kwargs)


def friendly_message(error):
    """Map a technical error to a message that is safe to show to users."""
    message = str(error) or DEFAULT_FRIENDLY_MESSAGE
    if not current_app.config.get("FRIENDLY_ERRORS"):
        return message

    lowered = message.lower()
    for pattern, friendly in FRIENDLY_MESSAGES.items():
        if pattern in lowered:
            return friendly
    return DEFAULT_FRIENDLY_MESSAGE


def first_error(messages):
    """Return the first message of a marshmallow error dict."""
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error(value)
    if isinstance(messages, (list, tuple)) and messages:
        return first_error(messages[0])
    return str(messages) if messages else "Invalid data"


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({"msg": first_error(error.messages), "errors": error.messages}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"msg": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error: %s", error)
        return jsonify({"msg": friendly_message(error)}), 500
