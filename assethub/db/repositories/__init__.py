"""SQLAlchemy-backed repositories for users, assets, and favourites."""

from .asset_repository import AssetRepository
from .favourite_repository import FavouriteRepository
from .types import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, FavouritePage, clamp_limit
from .user_repository import UserRepository

__all__ = [
    "AssetRepository",
    "DEFAULT_PAGE_SIZE",
    "FavouritePage",
    "FavouriteRepository",
    "MAX_PAGE_SIZE",
    "UserRepository",
    "clamp_limit",
]
