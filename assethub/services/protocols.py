"""Repository contracts consumed by the service layer.

The user and asset protocols form the read-only existence oracle consulted by
the favourites workflow; the favourites protocol is the store the workflow
mutates.  SQLAlchemy implementations live in :mod:`assethub.db.repositories`
and tests substitute their own doubles.
"""

from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from assethub.db.models import Asset, Favourite, User
from assethub.db.repositories.types import FavouritePage


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Answers whether a user exists."""

    async def get(self, user_id: uuid.UUID) -> User:
        """Return the user or raise ``UserNotFoundError``."""

    async def exists(self, user_id: uuid.UUID) -> bool:
        """Report whether ``user_id`` refers to a known user."""


@runtime_checkable
class AssetRepositoryProtocol(Protocol):
    """Loads assets and persists description edits."""

    async def get(self, asset_id: uuid.UUID) -> Asset:
        """Return the asset or raise ``AssetNotFoundError``."""

    async def update(self, asset: Asset) -> Asset:
        """Persist mutable fields of ``asset``."""


@runtime_checkable
class FavouriteRepositoryProtocol(Protocol):
    """Stores favourite relations and lists them in keyset order."""

    async def create(self, favourite: Favourite) -> Favourite:
        """Insert a favourite; duplicates raise ``FavouriteAlreadyExistsError``."""

    async def delete(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> None:
        """Remove by pair; a missing pair raises ``FavouriteNotFoundError``."""

    async def exists(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> bool:
        """Report whether the pair is already favourited."""

    async def list_keyset(
        self,
        user_id: uuid.UUID,
        *,
        limit: int | None = None,
        after: str | None = None,
    ) -> FavouritePage:
        """Return one ascending page plus an optional continuation cursor."""

    async def list_offset(
        self,
        user_id: uuid.UUID,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[Asset]:
        """Return a newest-first window with no continuation token."""


__all__ = [
    "AssetRepositoryProtocol",
    "FavouriteRepositoryProtocol",
    "UserRepositoryProtocol",
]
