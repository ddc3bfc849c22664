"""Conversation orchestration: chat lifecycle, quota gating and round-trips."""

from datetime import UTC, date, datetime

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.core.exceptions import (
    ChatNotFoundError,
    InvalidInputError,
    PersistenceError,
    QuotaExceededError,
    UserNotFoundError,
)
from rizzchat.core.settings import QuotaConfig
from rizzchat.models.chat import Chat
from rizzchat.models.user import User
from rizzchat.repositories.chat_repo import ChatRepository
from rizzchat.repositories.user_repo import UserRepository
from rizzchat.schemas.chat_schema import (
    ChatMessage,
    ChatResponse,
    SendMessageResponse,
    UsageResponse,
)
from rizzchat.services.completion_service import CompletionService
from rizzchat.services.quota import is_message_allowed, remaining_allowance
from rizzchat.services.title_service import TitleService

logger = structlog.get_logger()


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with offset."""
    return datetime.now(UTC).isoformat()


def _to_response(chat: Chat) -> ChatResponse:
    """Validate a stored chat; a malformed transcript is a storage fault."""
    try:
        return ChatResponse.model_validate(chat)
    except ValidationError as e:
        logger.error(
            "Stored chat is malformed", chat_id=chat.id, errors=e.error_count()
        )
        raise PersistenceError("Stored chat transcript is malformed") from e


class ConversationService:
    """Chat operations on behalf of one authenticated user.

    A chat starts empty and becomes active after its first completed
    round-trip (one user message plus one assistant reply). Round-trips are
    all-or-nothing: nothing is written unless the reply was generated.
    """

    def __init__(
        self,
        chat_repo: ChatRepository,
        user_repo: UserRepository,
        completion_service: CompletionService,
        title_service: TitleService,
        session: AsyncSession,
        quota: QuotaConfig,
        user_id: str,
    ) -> None:
        self._chat_repo = chat_repo
        self._user_repo = user_repo
        self._completion_service = completion_service
        self._title_service = title_service
        self._session = session
        self._quota = quota
        self._user_id = user_id

    async def list_chats(self) -> list[ChatResponse]:
        """The user's chats, most recently updated first."""
        chats = await self._chat_repo.find_by_user(self._user_id)
        return [_to_response(chat) for chat in chats]

    async def get_chat(self, chat_id: int) -> ChatResponse:
        chat = await self._get_owned_chat(chat_id)
        return _to_response(chat)

    async def create_chat(self) -> ChatResponse:
        """Create an empty chat if today's quota still allows a message."""
        user = await self._get_user()
        await self._ensure_quota(user)

        chat = await self._chat_repo.create(
            user_id=self._user_id,
            title=self._quota.default_chat_title,
        )
        await self._session.commit()

        logger.info("Chat created", user_id=self._user_id, chat_id=chat.id)
        return _to_response(chat)

    async def send_message(self, chat_id: int, text: str) -> SendMessageResponse:
        """Run one round-trip on a chat.

        Raises:
            ChatNotFoundError: the chat does not exist or is not owned by the user.
            InvalidInputError: ``text`` is empty or not a string.
            QuotaExceededError: a free user already sent today's allowance.
            GenerationFailedError: the reply could not be generated; nothing
                is persisted.
        """
        chat = await self._get_owned_chat(chat_id)
        if not isinstance(text, str) or not text:
            raise InvalidInputError("Message is required")

        user = await self._get_user()
        await self._ensure_quota(user)

        history = _to_response(chat).messages
        is_first_turn = not history

        user_message = ChatMessage(role="user", content=text, timestamp=utc_timestamp())
        reply = await self._completion_service.generate_reply([*history, user_message])
        assistant_message = ChatMessage(
            role="assistant", content=reply, timestamp=utc_timestamp()
        )

        title: str | None = None
        if is_first_turn:
            title = await self._title_service.generate_title(
                text, fallback=chat.title or self._quota.default_chat_title
            )

        updated = await self._chat_repo.replace_messages(
            chat,
            messages=[
                *chat.messages,
                user_message.model_dump(),
                assistant_message.model_dump(),
            ],
            title=title,
        )
        await self._session.commit()

        logger.info(
            "Message round-trip completed",
            user_id=self._user_id,
            chat_id=chat_id,
            first_turn=is_first_turn,
        )
        return SendMessageResponse(
            message=assistant_message,
            chat=_to_response(updated),
        )

    async def delete_chat(self, chat_id: int) -> None:
        """Delete a chat owned by the user."""
        deleted = await self._chat_repo.delete_by_id_and_user(chat_id, self._user_id)
        if not deleted:
            raise ChatNotFoundError
        await self._session.commit()
        logger.info("Chat deleted", user_id=self._user_id, chat_id=chat_id)

    async def get_usage(self) -> UsageResponse:
        """Today's quota consumption for the user."""
        user = await self._get_user()
        chats = await self._chat_repo.find_by_user(self._user_id)
        used, remaining = remaining_allowance(
            is_pro=user.is_pro,
            histories=(chat.messages for chat in chats),
            today=self._today(),
            daily_limit=self._quota.daily_message_limit,
            tz=self._quota.tzinfo,
        )
        return UsageResponse(
            is_pro=user.is_pro,
            daily_limit=None if user.is_pro else self._quota.daily_message_limit,
            used_today=used,
            remaining=remaining,
        )

    # --- helpers ---

    def _today(self) -> date:
        return datetime.now(self._quota.tzinfo).date()

    async def _get_user(self) -> User:
        user = await self._user_repo.find_by_id(self._user_id)
        if user is None:
            raise UserNotFoundError
        return user

    async def _get_owned_chat(self, chat_id: int) -> Chat:
        chat = await self._chat_repo.find_by_id_and_user(chat_id, self._user_id)
        if chat is None:
            raise ChatNotFoundError
        return chat

    async def _ensure_quota(self, user: User) -> None:
        """Re-count today's messages across all of the user's chats."""
        if user.is_pro:
            return
        chats = await self._chat_repo.find_by_user(self._user_id)
        allowed = is_message_allowed(
            is_pro=user.is_pro,
            histories=(chat.messages for chat in chats),
            today=self._today(),
            daily_limit=self._quota.daily_message_limit,
            tz=self._quota.tzinfo,
        )
        if not allowed:
            logger.info("Daily message quota exceeded", user_id=self._user_id)
            raise QuotaExceededError
