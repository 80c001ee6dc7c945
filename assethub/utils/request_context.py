"""Request-scoped identifiers shared by middleware, handlers, and logs.

Each inbound request runs in its own task, so a ``ContextVar`` keeps the
identifier isolated per request without global mutable state.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = [
    "REQUEST_ID_CONTEXT",
    "clear_request_id",
    "get_request_id",
    "set_request_id",
]

REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(request_id: str) -> Token[str]:
    """Store ``request_id`` and return the token needed to reset it."""

    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    """Return the active request identifier, or ``""`` outside a request."""

    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    """Reset the identifier, restoring the previous value when ``token`` is given."""

    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")
