"""Asset editing endpoint."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from assethub.schemas.asset import AssetEditRequest, AssetResponse
from assethub.services.asset_service import AssetService
from assethub.services.dependencies import get_asset_service

router = APIRouter()


@router.patch("/{asset_id}/description", response_model=AssetResponse)
async def edit_description(
    asset_id: uuid.UUID,
    payload: AssetEditRequest,
    service: AssetService = Depends(get_asset_service),
) -> AssetResponse:
    """Replace an asset's description. Blank descriptions are rejected with 400."""

    asset = await service.edit_description(
        asset_id=asset_id, description=payload.description
    )
    return AssetResponse.from_model(asset)
