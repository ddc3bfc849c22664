"""Global dependencies for the application."""

from collections.abc import Callable
from functools import lru_cache
from typing import Any

from fastapi import Depends, Request
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from rizzchat.core.config import settings
from rizzchat.core.database import get_async_session
from rizzchat.core.exceptions import AuthenticationError, AuthorizationError
from rizzchat.core.redis import get_redis
from rizzchat.repositories.chat_repo import ChatRepository
from rizzchat.repositories.redeem_code_repo import RedeemCodeRepository
from rizzchat.repositories.user_repo import UserRepository
from rizzchat.services.auth_service import AuthService
from rizzchat.services.completion_service import CompletionService
from rizzchat.services.conversation_service import ConversationService
from rizzchat.services.redemption_service import RedemptionService
from rizzchat.services.title_service import TitleService
from rizzchat.services.token_service import TokenService

# --- LLM ---


@lru_cache
def get_llm() -> BaseChatModel:
    """Get the LLM instance based on the configured provider."""
    llm_config = settings.llm
    match llm_config.provider:
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=llm_config.openai_api_key,
                temperature=llm_config.temperature,
                max_tokens=llm_config.max_tokens,  # type: ignore[call-arg]
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=llm_config.anthropic_api_key,
                temperature=llm_config.temperature,
                max_tokens=llm_config.max_tokens,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


def get_completion_service() -> CompletionService:
    """Get the chat reply generator."""
    return CompletionService(get_llm(), timeout_seconds=settings.llm.timeout_seconds)


def get_title_service() -> TitleService:
    """Get the chat title generator."""
    return TitleService(get_llm(), max_tokens=settings.llm.title_max_tokens)


# --- Auth dependencies ---


class CurrentUser(BaseModel):
    """Authenticated user extracted from request state."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: str
    jti: str
    exp: int
    profile: dict[str, Any]


def get_current_user(request: Request) -> CurrentUser:
    """Extract the authenticated user from middleware-populated state."""
    state = getattr(request, "state", None)
    user_id = getattr(state, "user_id", None) if state else None
    if user_id is None:
        raise AuthenticationError(message="Not authenticated")
    return CurrentUser(
        id=user_id,
        role=state.role,
        jti=state.jti,
        exp=state.exp,
        profile=state.profile,
    )


def require_role(*allowed_roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory that enforces role-based access control."""

    def _check(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                message=f"Role '{current_user.role}' is not permitted"
            )
        return current_user

    return _check


def get_token_service() -> TokenService:
    """Get TokenService backed by the active Redis client."""
    return TokenService(get_redis())


# --- Repositories ---


def get_user_repository(
    session: AsyncSession = Depends(get_async_session),
) -> UserRepository:
    """Get UserRepository bound to the current session."""
    return UserRepository(session)


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_redeem_code_repository(
    session: AsyncSession = Depends(get_async_session),
) -> RedeemCodeRepository:
    """Get RedeemCodeRepository bound to the current session."""
    return RedeemCodeRepository(session)


# --- Services ---


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
    session: AsyncSession = Depends(get_async_session),
) -> AuthService:
    """Get AuthService with all dependencies."""
    return AuthService(
        user_repo=user_repo,
        token_service=token_service,
        session=session,
    )


def get_conversation_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    completion_service: CompletionService = Depends(get_completion_service),
    title_service: TitleService = Depends(get_title_service),
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConversationService:
    """Get ConversationService for the authenticated user."""
    return ConversationService(
        chat_repo=chat_repo,
        user_repo=user_repo,
        completion_service=completion_service,
        title_service=title_service,
        session=session,
        quota=settings.quota,
        user_id=current_user.id,
    )


def get_redemption_service(
    code_repo: RedeemCodeRepository = Depends(get_redeem_code_repository),
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(get_current_user),
) -> RedemptionService:
    """Get RedemptionService for the authenticated user."""
    return RedemptionService(
        code_repo=code_repo,
        session=session,
        user_id=current_user.id,
    )
