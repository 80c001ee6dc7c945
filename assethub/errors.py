"""Domain errors raised by repositories and services.

Every error carries an :class:`ErrorKind` so the HTTP layer can pick a status
code without inspecting messages.  ``NotFoundError`` also subclasses
:class:`LookupError` and ``InvalidInputError`` subclasses :class:`ValueError`,
which keeps ``except LookupError`` style call sites working.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Outcome categories that transports translate into status signals."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"


class AssetHubError(Exception):
    """Base class for expected, caller-recoverable failures."""

    kind: ErrorKind
    default_message: str = "request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(AssetHubError, LookupError):
    kind = ErrorKind.NOT_FOUND
    default_message = "not found"


class ConflictError(AssetHubError):
    kind = ErrorKind.CONFLICT
    default_message = "conflict"


class InvalidInputError(AssetHubError, ValueError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "invalid input"


class UserNotFoundError(NotFoundError):
    default_message = "user not found"


class AssetNotFoundError(NotFoundError):
    default_message = "asset not found"


class FavouriteNotFoundError(NotFoundError):
    default_message = "favourite not found"


class FavouriteAlreadyExistsError(ConflictError):
    default_message = "favourite already exists"


class BadCursorError(InvalidInputError):
    default_message = "bad cursor"


class EmptyDescriptionError(InvalidInputError):
    default_message = "asset description cannot be empty"


__all__ = [
    "AssetHubError",
    "AssetNotFoundError",
    "BadCursorError",
    "ConflictError",
    "EmptyDescriptionError",
    "ErrorKind",
    "FavouriteAlreadyExistsError",
    "FavouriteNotFoundError",
    "InvalidInputError",
    "NotFoundError",
    "UserNotFoundError",
]
