"""Account sync and session revocation."""

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.repositories.user_repo import UserRepository
from rizzchat.schemas.auth_schema import MessageResponse, UserResponse
from rizzchat.services.token_service import TokenService

logger = structlog.get_logger()


class AuthService:
    """Mirrors identity-provider accounts locally and revokes access tokens."""

    def __init__(
        self,
        user_repo: UserRepository,
        token_service: TokenService,
        session: AsyncSession,
    ) -> None:
        self._user_repo = user_repo
        self._token_service = token_service
        self._session = session

    async def sync_user(self, user_id: str, profile: dict[str, Any]) -> UserResponse:
        """Upsert the caller's account from token claims and return it."""
        user = await self._user_repo.upsert(
            user_id=user_id,
            email=profile.get("email"),
            first_name=profile.get("first_name"),
            last_name=profile.get("last_name"),
            profile_image_url=profile.get("profile_image_url"),
        )
        await self._session.commit()
        logger.info("User synced", user_id=user_id, is_pro=user.is_pro)
        return UserResponse.model_validate(user)

    async def logout(self, user_id: str, jti: str, exp: int) -> MessageResponse:
        """Revoke the presented access token for the rest of its lifetime."""
        await self._token_service.blacklist_token(jti, exp)
        logger.info("User logged out", user_id=user_id)
        return MessageResponse(message="Successfully logged out")
