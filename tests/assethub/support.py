"""Row builders shared by the AssetHub test modules.

The helpers return identifiers rather than ORM instances so tests never touch
attributes that a rollback may have expired.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from assethub.db.models import Asset, AssetType, Favourite, User

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


async def create_user(session: AsyncSession, user_id: uuid.UUID | None = None) -> uuid.UUID:
    user = User(id=user_id or uuid.uuid4(), created_at=T0)
    session.add(user)
    await session.flush()
    return user.id


async def create_asset(
    session: AsyncSession,
    *,
    asset_type: AssetType = AssetType.CHART,
    description: str = "Weekly signups",
    payload: dict[str, Any] | None = None,
) -> uuid.UUID:
    asset = Asset(
        id=uuid.uuid4(),
        asset_type=asset_type,
        description=description,
        payload=payload if payload is not None else {"title": description},
        created_at=T0,
    )
    session.add(asset)
    await session.flush()
    return asset.id


async def create_favourite(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    asset_id: uuid.UUID,
    created_at: datetime,
    favourite_id: uuid.UUID | None = None,
) -> uuid.UUID:
    favourite = Favourite(
        id=favourite_id or uuid.uuid4(),
        user_id=user_id,
        asset_id=asset_id,
        created_at=created_at,
    )
    session.add(favourite)
    await session.flush()
    return favourite.id


async def favourite_new_assets(
    session: AsyncSession,
    user_id: uuid.UUID,
    count: int,
    *,
    step: timedelta = timedelta(seconds=1),
) -> list[uuid.UUID]:
    """Create ``count`` assets favourited by ``user_id`` at increasing times."""

    asset_ids: list[uuid.UUID] = []
    for index in range(count):
        asset_id = await create_asset(session, description=f"Asset {index}")
        await create_favourite(
            session,
            user_id=user_id,
            asset_id=asset_id,
            created_at=T0 + step * index,
        )
        asset_ids.append(asset_id)
    return asset_ids


async def count_favourites(session: AsyncSession) -> int:
    return int(await session.scalar(select(func.count()).select_from(Favourite)) or 0)
