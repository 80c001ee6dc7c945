"""User lookup endpoint."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from assethub.schemas.user import UserResponse
from assethub.services.dependencies import get_user_service
from assethub.services.user_service import UserService

router = APIRouter()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.model_validate(await service.get(user_id))
