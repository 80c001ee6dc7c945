"""FastAPI dependency wiring for the AssetHub services.

Separating dependency factories from service implementation modules keeps the
latter free of web-layer concerns, enabling easier reuse in tests and other
consumers (e.g. CLI utilities).
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from assethub.db.connection import get_db
from assethub.db.repositories import (
    AssetRepository,
    FavouriteRepository,
    UserRepository,
)
from assethub.services.asset_service import AssetService
from assethub.services.favourites_service import FavouritesService
from assethub.services.user_service import UserService


def get_favourites_service(
    session: AsyncSession = Depends(get_db),
) -> FavouritesService:
    """Provide a :class:`FavouritesService` bound to the request's session.

    All three repositories share the same session so the existence checks and
    the final insert observe one transaction.
    """

    return FavouritesService(
        users=UserRepository(session),
        assets=AssetRepository(session),
        favourites=FavouriteRepository(session),
    )


def get_asset_service(session: AsyncSession = Depends(get_db)) -> AssetService:
    return AssetService(AssetRepository(session))


def get_user_service(session: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(UserRepository(session))


__all__ = ["get_asset_service", "get_favourites_service", "get_user_service"]
