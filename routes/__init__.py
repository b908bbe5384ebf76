"""Shared helpers for route blueprints."""

from __future__ import annotations

from flask import current_app, jsonify, request
from flask_wtf import FlaskForm
from flask_wtf.csrf import validate_csrf
from werkzeug.datastructures import ImmutableMultiDict
from wtforms.validators import ValidationError

from services.result import ErrorKind, ServiceResult

__all__ = [
    "form_error_response",
    "json_error",
    "json_formdata",
    "json_payload",
    "result_response",
    "validate_request_csrf",
]

STATUS_BY_ERROR = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNEXPECTED: 500,
}


def validate_request_csrf(token: str | None) -> tuple[bool, str | None]:
    """Validate CSRF tokens supplied with JSON payloads."""
    if not current_app.config.get("WTF_CSRF_ENABLED", True):
        return True, None
    if not token:
        return False, "The CSRF token is missing."
    try:
        validate_csrf(token)
    except ValidationError:
        return (
            False,
            "The CSRF token is invalid or has expired. Please refresh and try again.",
        )
    except Exception:
        return False, "The CSRF token is invalid."
    return True, None


def json_payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def json_formdata() -> ImmutableMultiDict:
    """Return the JSON body as form data, dropping null values."""
    return ImmutableMultiDict({key: value for key, value in json_payload().items() if value is not None})


def json_error(message: str, *, error: ErrorKind = ErrorKind.VALIDATION, status: int | None = None):
    """Return a failed envelope as a JSON response."""
    payload = ServiceResult.fail(message, error).to_dict()
    return jsonify(payload), status or STATUS_BY_ERROR[error]


def form_error_response(form: FlaskForm, message: str | None = None):
    """Return a JSON response detailing form errors."""
    effective_message = message or "Please correct the highlighted fields."
    csrf_errors = form.errors.get("csrf_token")
    if csrf_errors:
        effective_message = csrf_errors[0]
    payload = ServiceResult.fail(effective_message, ErrorKind.VALIDATION).to_dict()
    payload["errors"] = form.errors
    return jsonify(payload), 400


def result_response(result: ServiceResult, *, success_status: int = 200):
    """Translate a service envelope into a JSON response and HTTP status."""
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_BY_ERROR.get(result.error, 500)
