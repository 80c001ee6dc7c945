"""Deterministic demo data for local development.

Seeding only runs against an empty database (no users and no assets) so it is
safe to call on every startup.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from assethub.db.models import Asset, AssetType, User, utcnow

logger = logging.getLogger(__name__)

SEED_USER_IDS: tuple[uuid.UUID, ...] = (
    uuid.UUID("11111111-1111-1111-1111-111111111111"),
    uuid.UUID("22222222-2222-2222-2222-222222222222"),
    uuid.UUID("33333333-3333-3333-3333-333333333333"),
)

SEED_ASSETS: tuple[dict[str, Any], ...] = (
    {
        "id": uuid.UUID("aaaaaaa1-0000-0000-0000-000000000001"),
        "asset_type": AssetType.CHART,
        "description": "Daily active users - last 7 days",
        "payload": {
            "title": "DAU",
            "x": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
            "y": [120, 150, 160, 170, 180, 200, 220],
        },
    },
    {
        "id": uuid.UUID("aaaaaaa1-0000-0000-0000-000000000002"),
        "asset_type": AssetType.CHART,
        "description": "Conversion rate by channel",
        "payload": {
            "title": "CR by Channel",
            "series": ["Email", "Ads", "Organic"],
            "values": [2.1, 1.3, 3.2],
            "y_label": "%",
        },
    },
    {
        "id": uuid.UUID("bbbbbbb2-0000-0000-0000-000000000001"),
        "asset_type": AssetType.INSIGHT,
        "description": "Insight: heavy social usage",
        "payload": {
            "text": "40% of millennials spend more than 3 hours on social media daily",
        },
    },
    {
        "id": uuid.UUID("bbbbbbb2-0000-0000-0000-000000000002"),
        "asset_type": AssetType.INSIGHT,
        "description": "Insight: cart abandonment",
        "payload": {
            "text": "Cart abandonment decreased 8% after one-click checkout rollout",
        },
    },
    {
        "id": uuid.UUID("ccccccc3-0000-0000-0000-000000000001"),
        "asset_type": AssetType.AUDIENCE,
        "description": "Audience: M 24-35, >3h/day social, >1 purchase last month",
        "payload": {
            "gender": "Male",
            "age_group": "24-35",
            "country": "US",
            "social_hours": ">3",
            "purchases_month": ">1",
        },
    },
    {
        "id": uuid.UUID("ccccccc3-0000-0000-0000-000000000002"),
        "asset_type": AssetType.AUDIENCE,
        "description": "Audience: F 24-35, >3h/day social, >1 purchase last month",
        "payload": {
            "gender": "Female",
            "age_group": "24-35",
            "country": "UK",
            "social_hours": ">3",
            "purchases_month": ">1",
        },
    },
)


async def seed_dev_once(session: AsyncSession) -> bool:
    """Insert the demo users and assets when both tables are empty.

    Returns ``True`` when rows were written.  The caller owns the transaction
    and is responsible for committing.
    """

    has_users = await session.scalar(select(exists().where(User.id.is_not(None))))
    has_assets = await session.scalar(select(exists().where(Asset.id.is_not(None))))
    if has_users or has_assets:
        logger.debug("Seed skipped: database already contains users or assets")
        return False

    now = utcnow()
    session.add_all(User(id=user_id, created_at=now) for user_id in SEED_USER_IDS)
    session.add_all(Asset(created_at=now, **row) for row in SEED_ASSETS)
    await session.flush()

    logger.info(
        "Seeded %d users and %d assets", len(SEED_USER_IDS), len(SEED_ASSETS)
    )
    return True


__all__ = ["SEED_ASSETS", "SEED_USER_IDS", "seed_dev_once"]
