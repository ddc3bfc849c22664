"""Redeem code business logic."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.core.exceptions import InvalidCodeError, RedeemCodeAlreadyExistsError
from rizzchat.repositories.redeem_code_repo import RedeemCodeRepository
from rizzchat.schemas.auth_schema import MessageResponse
from rizzchat.schemas.redeem_schema import RedeemCodeResponse, normalize_code

logger = structlog.get_logger()

REDEEMED_MESSAGE = "Code redeemed successfully! You now have Pro access."


class RedemptionService:
    """Exchanges one-time codes for a permanent pro upgrade."""

    def __init__(
        self,
        code_repo: RedeemCodeRepository,
        session: AsyncSession,
        user_id: str,
    ) -> None:
        self._code_repo = code_repo
        self._session = session
        self._user_id = user_id

    async def redeem(self, code: str) -> MessageResponse:
        """Redeem ``code`` for the current user.

        Marking the code used and upgrading the user commit together or not
        at all; callers never observe one without the other.

        Raises:
            InvalidCodeError: the code is unknown or already used.
        """
        normalized = normalize_code(code)
        if not normalized:
            raise InvalidCodeError

        try:
            if not await self._code_repo.redeem(normalized, self._user_id):
                raise InvalidCodeError
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        logger.info("Redeem code used", code=normalized, user_id=self._user_id)
        return MessageResponse(message=REDEEMED_MESSAGE)

    async def create_code(self, code: str) -> RedeemCodeResponse:
        """Create a new unused code (administrative)."""
        normalized = normalize_code(code)
        if await self._code_repo.exists_by_code(normalized):
            raise RedeemCodeAlreadyExistsError

        redeem_code = await self._code_repo.create(normalized)
        await self._session.commit()

        logger.info("Redeem code created", code=normalized, created_by=self._user_id)
        return RedeemCodeResponse.model_validate(redeem_code)
