from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """User returned by ``GET /api/users/{user_id}``."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
