"""Chat repository for conversation database operations."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.models.chat import Chat


class ChatRepository:
    """Encapsulates chat queries. Every lookup is scoped to an owner."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_user(self, user_id: str) -> list[Chat]:
        """All chats of a user, most recently updated first."""
        result = await self._session.execute(
            select(Chat)
            .where(Chat.user_id == user_id)
            .order_by(Chat.updated_at.desc(), Chat.id.desc())
        )
        return list(result.scalars().all())

    async def find_by_id_and_user(self, chat_id: int, user_id: str) -> Chat | None:
        """Find a chat only if it belongs to the given user."""
        result = await self._session.execute(
            select(Chat).where(and_(Chat.id == chat_id, Chat.user_id == user_id))
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: str, title: str | None = None) -> Chat:
        """Create an empty chat."""
        chat = Chat(user_id=user_id, title=title, messages=[])
        self._session.add(chat)
        await self._session.flush()
        await self._session.refresh(chat)
        return chat

    async def replace_messages(
        self,
        chat: Chat,
        messages: list[dict[str, Any]],
        title: str | None = None,
    ) -> Chat:
        """Overwrite the transcript (and optionally the title) and touch updated_at."""
        chat.messages = messages
        if title is not None:
            chat.title = title
        chat.updated_at = datetime.now(UTC)
        await self._session.flush()
        return chat

    async def delete_by_id_and_user(self, chat_id: int, user_id: str) -> bool:
        """Delete a chat owned by the user. Returns False if nothing matched."""
        result = await self._session.execute(
            delete(Chat).where(and_(Chat.id == chat_id, Chat.user_id == user_id))
        )
        return result.rowcount > 0
