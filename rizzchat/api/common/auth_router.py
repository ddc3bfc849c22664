"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rizzchat.dependencies import CurrentUser, get_auth_service, get_current_user
from rizzchat.schemas.auth_schema import MessageResponse, UserResponse
from rizzchat.schemas.response_schema import (
    ApiResponse,
    error_responses,
    success_response,
)
from rizzchat.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


@router.get(
    "/user",
    response_model=ApiResponse[UserResponse],
    responses=error_responses(401),
)
async def get_user(
    auth_service: AuthServiceDep,
    current_user: CurrentUserDep,
) -> dict:
    """Return the caller's account, syncing it from the token's identity claims."""
    result = await auth_service.sync_user(current_user.id, current_user.profile)
    return success_response(result)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(
    auth_service: AuthServiceDep,
    current_user: CurrentUserDep,
) -> dict:
    """Revoke the current access token."""
    result = await auth_service.logout(
        current_user.id, current_user.jti, current_user.exp
    )
    return success_response(result)
