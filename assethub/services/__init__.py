"""Service layer orchestrating repositories for the HTTP handlers."""

from .asset_service import AssetService
from .favourites_service import FavouritesService
from .user_service import UserService

__all__ = ["AssetService", "FavouritesService", "UserService"]
