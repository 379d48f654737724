"""Domain exceptions raised by account workflows and rendered by the HTTP layer."""

from __future__ import annotations

from typing import Any


class AccountServiceError(Exception):
    """Base class for expected failures carrying a client-safe message."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": "error", "message": self.message}
        if self.details:
            payload["errors"] = [
                {"field": field, "message": message} for field, message in self.details.items()
            ]
        return payload


class ValidationError(AccountServiceError):
    status_code = 400
    message = "Validation failed"


class EmailTakenError(AccountServiceError):
    status_code = 400
    message = "Email already exists"


class AccountNotFoundError(AccountServiceError):
    status_code = 404
    message = "User not found"


class InvalidCredentialsError(AccountServiceError):
    status_code = 400
    message = "Invalid credentials"


class UnauthenticatedError(AccountServiceError):
    status_code = 401
    message = "Authentication required"


class ForbiddenError(AccountServiceError):
    status_code = 403
    message = "Forbidden"


class StoreUnavailableError(AccountServiceError):
    """Account store failure; the cause is logged, never returned to callers."""

    status_code = 500
    message = "Internal server error"
