"""User repository for database operations."""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.models.user import User


class UserRepository:
    """Encapsulates user-related database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: str) -> User | None:
        """Find a user by primary key."""
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def upsert(
        self,
        user_id: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        """Insert the user or refresh its profile fields, keyed on id.

        The entitlement tier is never touched here.
        """
        user = await self.find_by_id(user_id)
        if user is None:
            user = User(
                id=user_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
                is_pro=False,
            )
            self._session.add(user)
            await self._session.flush()
            await self._session.refresh(user)
            return user

        user.email = email
        user.first_name = first_name
        user.last_name = last_name
        user.profile_image_url = profile_image_url
        user.updated_at = datetime.now(UTC)
        await self._session.flush()
        return user

    async def mark_pro(self, user_id: str) -> bool:
        """Upgrade a user to the pro tier. Returns False if no such user."""
        result = await self._session.execute(
            update(User)
            .where(User.id == user_id)
            .values(is_pro=True, updated_at=datetime.now(UTC))
        )
        return result.rowcount == 1
