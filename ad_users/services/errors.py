from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class UserError(Exception):
    """Structured failure of a user operation."""

    http_status = 500
    error = True

    def __init__(self, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "message": self.message,
            "httpStatus": self.http_status,
        }


class InvalidUserError(UserError, ValueError):
    """Input rejected before anything was sent to the directory."""

    http_status = 400


class UserNotFoundError(UserError):
    http_status = 404

    def __init__(self, message: str = "User does not exist.") -> None:
        super().__init__(message)


class UserExistsError(UserError):
    http_status = 400


class UserCreationError(UserError):
    http_status = 503


class UserRemovalError(UserError):
    http_status = 503


@dataclass
class AuthResult:
    """Outcome of a credential check.

    Rejected credentials are reported here with the directory's diagnostic
    in ``detail`` rather than raised.
    """

    authorized: bool
    detail: str | None = None
    message: str | None = None
