"""Pydantic schemas for asset payloads."""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from assethub.db.models import Asset, AssetType


class AssetResponse(BaseModel):
    """Asset representation returned by listing and edit endpoints."""

    id: uuid.UUID
    type: AssetType = Field(..., description="Asset category: chart, insight, or audience.")
    description: str
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Category-specific structured document.",
    )

    @classmethod
    def from_model(cls, asset: Asset) -> AssetResponse:
        return cls(
            id=asset.id,
            type=asset.asset_type,
            description=asset.description,
            payload=asset.payload or {},
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "aaaaaaa1-0000-0000-0000-000000000001",
                "type": "chart",
                "description": "Daily active users - last 7 days",
                "payload": {"title": "DAU"},
            }
        }
    )


class AssetEditRequest(BaseModel):
    """Body for ``PATCH /api/assets/{asset_id}/description``."""

    model_config = ConfigDict(extra="forbid")

    description: str = Field(..., max_length=1024)
