"""Pydantic schemas for API requests and responses."""

from assethub.schemas.asset import AssetEditRequest, AssetResponse  # noqa: F401
from assethub.schemas.error import (  # noqa: F401
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from assethub.schemas.favourites import (  # noqa: F401
    FavouriteAddRequest,
    FavouriteListResponse,
    FavouriteOffsetListResponse,
    FavouriteResponse,
)
from assethub.schemas.user import UserResponse  # noqa: F401
