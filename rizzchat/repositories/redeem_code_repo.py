"""Redeem code repository, including the atomic redemption primitive."""

from datetime import UTC, datetime

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.core.exceptions import UserNotFoundError
from rizzchat.models.redeem_code import RedeemCode
from rizzchat.repositories.user_repo import UserRepository


class RedeemCodeRepository:
    """Encapsulates redeem code queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepository(session)

    async def find_by_code(self, code: str) -> RedeemCode | None:
        result = await self._session.execute(
            select(RedeemCode).where(RedeemCode.code == code)
        )
        return result.scalar_one_or_none()

    async def exists_by_code(self, code: str) -> bool:
        result = await self._session.execute(
            select(RedeemCode.id).where(RedeemCode.code == code)
        )
        return result.scalar_one_or_none() is not None

    async def create(self, code: str) -> RedeemCode:
        """Create an unused code. ``code`` must already be normalized."""
        redeem_code = RedeemCode(code=code, used=False)
        self._session.add(redeem_code)
        await self._session.flush()
        await self._session.refresh(redeem_code)
        return redeem_code

    async def redeem(self, code: str, user_id: str) -> bool:
        """Claim an unused code for a user and upgrade that user to pro.

        The claim is a compare-and-set on ``used = false``, so only one
        caller can win it. Both writes happen in the caller's transaction:
        the caller commits on success and must roll back when this raises.

        Returns False when the code is unknown or already used.
        Raises UserNotFoundError when the code was claimed but the user row
        is missing.
        """
        claimed = await self._session.execute(
            update(RedeemCode)
            .where(and_(RedeemCode.code == code, RedeemCode.used.is_(False)))
            .values(used=True, used_by_id=user_id, used_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            return False

        if not await self._users.mark_pro(user_id):
            raise UserNotFoundError
        return True
