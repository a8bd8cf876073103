"""Custom exceptions for centralized error handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", details: Any | None = None) -> None:
        super().__init__(code="validation_error", message=message, status_code=400, details=details)


class UnauthorizedError(AppError):
    """No authenticated user on the request."""

    def __init__(self, message: str = "Unauthorized", details: Any | None = None) -> None:
        super().__init__(code="unauthorized", message=message, status_code=401, details=details)


class ForbiddenError(AppError):
    """Authenticated user is not allowed to act on the resource."""

    def __init__(self, message: str = "Forbidden", details: Any | None = None) -> None:
        super().__init__(code="forbidden", message=message, status_code=403, details=details)


class NotFoundError(AppError):
    """Resource not found."""

    def __init__(self, message: str = "Not found", details: Any | None = None) -> None:
        super().__init__(code="not_found", message=message, status_code=404, details=details)


class ConflictError(AppError):
    """Conflict (lost race, slot no longer in the required state, unique constraint)."""

    def __init__(self, message: str = "Conflict", details: Any | None = None) -> None:
        super().__init__(code="conflict", message=message, status_code=409, details=details)


class StoreError(AppError):
    """Backing store unreachable or transaction failed. Safe to retry."""

    def __init__(self, message: str = "Store unavailable", details: Any | None = None) -> None:
        super().__init__(code="store_unavailable", message=message, status_code=503, details=details)
