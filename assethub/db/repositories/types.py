"""Value objects shared by the favourites repository and its callers."""

from __future__ import annotations

from dataclasses import dataclass, field

from assethub.db.models import Asset

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50


def clamp_limit(limit: int | None) -> int:
    """Apply the page-size policy: ``None``/non-positive -> 20, capped at 50."""

    if limit is None or limit <= 0:
        return DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE)


@dataclass(frozen=True)
class FavouritePage:
    """One page of favourited assets in ascending ``(created_at, id)`` order.

    ``next_cursor`` is ``None`` on the final page.
    """

    assets: list[Asset] = field(default_factory=list)
    next_cursor: str | None = None


__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "FavouritePage", "clamp_limit"]
