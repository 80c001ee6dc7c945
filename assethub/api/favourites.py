"""FastAPI router exposing a user's favourites.

Domain errors raised by the service propagate to the application-level
``AssetHubError`` handler, which maps not-found, conflict, and invalid-input
outcomes to 404, 409, and 400 respectively.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from assethub.db.repositories import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, clamp_limit
from assethub.schemas.asset import AssetResponse
from assethub.schemas.favourites import (
    FavouriteAddRequest,
    FavouriteListResponse,
    FavouriteOffsetListResponse,
    FavouriteResponse,
)
from assethub.services.dependencies import get_favourites_service
from assethub.services.favourites_service import FavouritesService

router = APIRouter()


@router.get("/{user_id}/favourites", response_model=FavouriteListResponse)
async def list_favourites(
    user_id: uuid.UUID,
    limit: int = Query(
        0,
        ge=0,
        description=(
            f"Max items to return (0 means default {DEFAULT_PAGE_SIZE},"
            f" values above {MAX_PAGE_SIZE} are clamped)"
        ),
    ),
    after: str | None = Query(None, description="Opaque cursor taken from next_after"),
    service: FavouritesService = Depends(get_favourites_service),
) -> FavouriteListResponse:
    """Return favourited assets in stable order using keyset pagination."""

    page = await service.list_keyset(user_id=user_id, limit=limit, after=after or None)
    return FavouriteListResponse(
        items=[AssetResponse.from_model(asset) for asset in page.assets],
        next_after=page.next_cursor,
    )


@router.get("/{user_id}/favourites/offset", response_model=FavouriteOffsetListResponse)
async def list_favourites_by_offset(
    user_id: uuid.UUID,
    limit: int = Query(0, ge=0),
    offset: int = Query(0, ge=0),
    service: FavouritesService = Depends(get_favourites_service),
) -> FavouriteOffsetListResponse:
    """Newest-first window without a cursor. Results shift as favourites change."""

    assets = await service.list_offset(
        user_id=user_id, limit=clamp_limit(limit), offset=offset
    )
    return FavouriteOffsetListResponse(
        items=[AssetResponse.from_model(asset) for asset in assets]
    )


@router.post(
    "/{user_id}/favourites",
    response_model=FavouriteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_favourite(
    user_id: uuid.UUID,
    payload: FavouriteAddRequest,
    service: FavouritesService = Depends(get_favourites_service),
) -> FavouriteResponse:
    """Add an asset to the user's favourites."""

    favourite = await service.add(user_id=user_id, asset_id=payload.asset_id)
    return FavouriteResponse.model_validate(favourite)


@router.delete(
    "/{user_id}/favourites/{asset_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_favourite(
    user_id: uuid.UUID,
    asset_id: uuid.UUID,
    service: FavouritesService = Depends(get_favourites_service),
) -> Response:
    """Remove an asset from the user's favourites."""

    await service.remove(user_id=user_id, asset_id=asset_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
