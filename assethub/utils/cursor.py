"""Opaque keyset pagination cursors.

A cursor records the ``(created_at, id)`` position of the last favourite a
caller has seen.  The pair is serialised as compact JSON and then encoded with
URL-safe base64 without padding, so tokens can travel in query strings
untouched.  Callers must treat the token as a black box and only hand back
values previously issued by :func:`encode_cursor`.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

__all__ = [
    "CursorDecodeError",
    "KeysetCursor",
    "decode_cursor",
    "encode_cursor",
]


class CursorDecodeError(ValueError):
    """Raised when a cursor token cannot be decoded."""


@dataclass(frozen=True)
class KeysetCursor:
    """Resume strictly after this ``(created_at, id)`` position."""

    created_at: datetime
    id: UUID


def encode_cursor(cursor: KeysetCursor) -> str:
    """Encode ``cursor`` into a URL-safe, padding-free token."""

    payload = {"t": cursor.created_at.isoformat(), "i": str(cursor.id)}
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(token: str) -> KeysetCursor:
    """Decode a token produced by :func:`encode_cursor`.

    Malformed base64, malformed JSON, missing fields, and values that do not
    parse as an ISO-8601 timestamp or UUID all raise :class:`CursorDecodeError`.
    """

    if not token:
        raise CursorDecodeError("empty cursor")

    padding = "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(
            (token + padding).encode("ascii"), altchars=b"-_", validate=True
        )
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise CursorDecodeError(f"invalid base64: {exc}") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CursorDecodeError(f"invalid payload: {exc}") from exc

    if not isinstance(payload, dict):
        raise CursorDecodeError("cursor payload must be an object")

    try:
        timestamp = payload["t"]
        identifier = payload["i"]
    except KeyError as exc:
        raise CursorDecodeError(f"missing field {exc.args[0]!r}") from exc

    if not isinstance(timestamp, str) or not isinstance(identifier, str):
        raise CursorDecodeError("cursor fields must be strings")

    try:
        created_at = datetime.fromisoformat(timestamp)
        favourite_id = UUID(identifier)
    except ValueError as exc:
        raise CursorDecodeError(f"invalid cursor field: {exc}") from exc

    return KeysetCursor(created_at=created_at, id=favourite_id)
