"""Exceptions raised by the directory client."""

from __future__ import annotations

from typing import Any

__all__ = [
    "ADAuthenticationError",
    "ADConnectionError",
    "ADEntryExistsError",
    "ADError",
]


class ADError(Exception):
    """An LDAP operation against Active Directory failed.

    ``description`` is the LDAP result name (``entryAlreadyExists``,
    ``invalidCredentials``, ...) and ``message`` the server diagnostic text.
    """

    def __init__(
        self,
        text: str,
        *,
        result: int | None = None,
        description: str = "",
        message: str = "",
    ) -> None:
        super().__init__(text)
        self.result = result
        self.description = description
        self.message = message or text

    @classmethod
    def from_result(cls, action: str, result: dict[str, Any] | None) -> ADError:
        res = dict(result or {})
        description = str(res.get("description") or "")
        message = str(res.get("message") or "")
        code = res.get("result")
        text = f"{action} failed: {description or 'unknown error'}"
        if message:
            text = f"{text} ({message})"
        error_class = cls
        if cls is ADError:
            if description == "entryAlreadyExists" or code == 68:
                error_class = ADEntryExistsError
            elif description == "invalidCredentials" or code == 49:
                error_class = ADAuthenticationError
        return error_class(
            text, result=code, description=description, message=message
        )


class ADEntryExistsError(ADError):
    """The object being created already exists in the directory."""


class ADAuthenticationError(ADError):
    """The directory rejected the supplied credentials."""


class ADConnectionError(ADError):
    """The directory could not be reached or refused the service bind."""
