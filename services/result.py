"""Uniform success/failure envelope returned by every service operation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from functools import wraps
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError

from database import db


class ErrorKind(StrEnum):
    """Categories of failure a caller may need to tell apart."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


class ServiceError(RuntimeError):
    """Raised inside a service when an operation cannot proceed."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


@dataclass
class ServiceResult:
    """Outcome of a service call; callers check ``success`` instead of catching."""

    success: bool
    message: str
    data: Any = None
    error: ErrorKind | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "ServiceResult":
        return cls(True, message, data, None)

    @classmethod
    def fail(cls, message: str, error: ErrorKind = ErrorKind.UNEXPECTED) -> "ServiceResult":
        return cls(False, message, None, error)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation of the result."""

        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.success:
            payload["data"] = self.data
        else:
            payload["error"] = self.error.value if self.error else None
        return payload


def service_operation(failure_message: str) -> Callable:
    """Turn raised service errors into failed ``ServiceResult`` envelopes.

    The session is rolled back on every failure so row locks taken by the
    operation are released. Storage errors are logged with their traceback
    and reported as ``ErrorKind.UNEXPECTED``.
    """

    def decorator(func: Callable[..., ServiceResult]) -> Callable[..., ServiceResult]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> ServiceResult:
            try:
                return func(*args, **kwargs)
            except ServiceError as error:
                db.session.rollback()
                logging.info("%s refused: %s", func.__name__, error.message)
                return ServiceResult.fail(error.message, error.kind)
            except SQLAlchemyError:
                db.session.rollback()
                logging.error("%s failed in %s", failure_message, func.__name__, exc_info=True)
                return ServiceResult.fail(failure_message, ErrorKind.UNEXPECTED)

        return wrapper

    return decorator
