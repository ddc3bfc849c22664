"""Redeem code endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from rizzchat.core.config import settings
from rizzchat.core.rate_limit import limiter
from rizzchat.dependencies import get_redemption_service, require_role
from rizzchat.schemas.auth_schema import MessageResponse
from rizzchat.schemas.redeem_schema import (
    CreateRedeemCodeRequest,
    RedeemCodeResponse,
    RedeemRequest,
)
from rizzchat.schemas.response_schema import (
    ApiResponse,
    error_responses,
    success_response,
)
from rizzchat.services.redemption_service import RedemptionService

router = APIRouter(prefix="/api", tags=["redeem"])

RedemptionServiceDep = Annotated[RedemptionService, Depends(get_redemption_service)]


@router.post(
    "/redeem",
    response_model=ApiResponse[MessageResponse],
    responses=error_responses(400, 404, 429),
)
@limiter.limit(settings.quota.redeem_rate_limit)
async def redeem(
    request: Request,
    body: RedeemRequest,
    service: RedemptionServiceDep,
) -> dict:
    """Redeem a one-time code for a permanent pro upgrade."""
    result = await service.redeem(body.code)
    return success_response(result)


@router.post(
    "/admin/codes",
    response_model=ApiResponse[RedeemCodeResponse],
    responses=error_responses(400, 403, 409),
    dependencies=[Depends(require_role("admin"))],
)
async def create_code(
    body: CreateRedeemCodeRequest,
    service: RedemptionServiceDep,
) -> dict:
    """Create a redeemable code (admin only)."""
    result = await service.create_code(body.code)
    return success_response(result)
