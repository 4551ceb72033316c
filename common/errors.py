"""Common error types and helpers for API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping


@dataclass(slots=True)
class AppError(Exception):
    """Base application error with a JSON friendly payload."""

    message: str
    code: str = "error"
    status_code: int = 400
    details: Mapping[str, Any] | None = None

    def to_dict(self) -> Mapping[str, Any]:
        payload: MutableMapping[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details or {}),
        }
        return payload


@dataclass(slots=True)
class ValidationAppError(AppError):
    """Error raised for malformed requests and rejected expressions."""

    code: str = "validation_error"
    status_code: int = 400


@dataclass(slots=True)
class UnprocessableAppError(AppError):
    """Well formed input that has no valid result, e.g. ``1/0``."""

    code: str = "unprocessable"
    status_code: int = 422


@dataclass(slots=True)
class NotFoundAppError(AppError):
    """Error raised when a graph session or history item is missing."""

    code: str = "not_found"
    status_code: int = 404


@dataclass(slots=True)
class InternalAppError(AppError):
    """Generic internal error wrapper to avoid leaking implementation details."""

    code: str = "internal_error"
    status_code: int = 500


__all__ = [
    "AppError",
    "ValidationAppError",
    "UnprocessableAppError",
    "NotFoundAppError",
    "InternalAppError",
]
