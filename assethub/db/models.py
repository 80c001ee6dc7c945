"""SQLAlchemy ORM models for users, assets, and favourite relations.

Favourites are ordered by ``(created_at, id)`` for keyset pagination, so both
columns are covered by a composite index scoped to the owning user.  The
``(user_id, asset_id)`` unique constraint is the authoritative guard against
duplicate favourites; service-level existence checks only improve the error
message.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    validates,
)
from sqlalchemy.types import TypeDecorator, Uuid

from assethub.errors import EmptyDescriptionError


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware ``DateTime`` that always round-trips as UTC.

    PostgreSQL hands back aware values already, while SQLite drops the offset;
    naive values read back are therefore tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class AssetType(str, Enum):
    """Closed set of asset categories."""

    CHART = "chart"
    INSIGHT = "insight"
    AUDIENCE = "audience"


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow
    )

    favourites: Mapped[list[Favourite]] = relationship(
        "Favourite", back_populates="user", passive_deletes=True
    )


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_type: Mapped[AssetType] = mapped_column(
        SAEnum(
            AssetType,
            name="asset_type",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        doc="Category of the asset. Fixed at creation time.",
    )
    description: Mapped[str] = mapped_column(String(1024), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        doc=(
            "Opaque structured document whose shape depends on the asset type,"
            " e.g. chart series or audience filters."
        ),
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow
    )

    favourites: Mapped[list[Favourite]] = relationship(
        "Favourite", back_populates="asset", passive_deletes=True
    )

    @validates("asset_type")
    def _validate_asset_type(self, key: str, value: AssetType | str) -> AssetType:
        resolved = AssetType(value)
        current = self.__dict__.get("asset_type")
        if current is not None and current != resolved:
            raise ValueError("asset_type is immutable once set")
        return resolved

    def edit_description(self, description: str) -> None:
        """Replace the description, rejecting blank values."""

        cleaned = description.strip()
        if not cleaned:
            raise EmptyDescriptionError()
        self.description = cleaned


class Favourite(Base):
    """Association row recording that a user favourited an asset."""

    __tablename__ = "favourites"
    __table_args__ = (
        UniqueConstraint("user_id", "asset_id", name="uq_favourites_user_asset"),
        Index("ix_favourites_user_created_id", "user_id", "created_at", "id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    asset_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        doc="Sort key for listing. Ties are broken by ``id``.",
    )

    user: Mapped[User] = relationship("User", back_populates="favourites")
    asset: Mapped[Asset] = relationship("Asset", back_populates="favourites")


__all__ = [
    "Asset",
    "AssetType",
    "Base",
    "Favourite",
    "UTCDateTime",
    "User",
    "utcnow",
]
