"""Pydantic schemas that power the favourites API surface."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from assethub.schemas.asset import AssetResponse


class FavouriteAddRequest(BaseModel):
    """Body for ``POST /api/users/{user_id}/favourites``."""

    model_config = ConfigDict(extra="forbid")

    asset_id: uuid.UUID = Field(..., description="Identifier of the asset to favourite.")


class FavouriteResponse(BaseModel):
    """Created favourite.

    The favourite's own identifier is deliberately omitted: callers address
    favourites by ``(user_id, asset_id)``.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    asset_id: uuid.UUID
    created_at: datetime


class FavouriteListResponse(BaseModel):
    """Keyset page of favourited assets."""

    items: list[AssetResponse] = Field(default_factory=list)
    next_after: str | None = Field(
        None,
        description=(
            "Opaque cursor for the following page. Pass it back verbatim as"
            " ``after``; ``null`` on the last page."
        ),
    )


class FavouriteOffsetListResponse(BaseModel):
    """Newest-first window of favourited assets without a continuation token."""

    items: list[AssetResponse] = Field(default_factory=list)
