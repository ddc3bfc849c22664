"""Chat request and response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One turn of a conversation, as embedded in a chat transcript."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: str = Field(description="ISO-8601 creation time")


class ChatResponse(BaseModel):
    """A chat with its full transcript."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    user_id: str
    title: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SendMessageRequest(BaseModel):
    """Body of POST /api/chats/{id}/messages."""

    message: str = Field(..., min_length=1)


class SendMessageResponse(BaseModel):
    """Assistant reply plus the updated chat."""

    model_config = ConfigDict(frozen=True)

    message: ChatMessage
    chat: ChatResponse


class UsageResponse(BaseModel):
    """Today's free-tier consumption for the current user."""

    model_config = ConfigDict(frozen=True)

    is_pro: bool
    daily_limit: int | None = Field(description="None when unlimited")
    used_today: int
    remaining: int | None = Field(description="None when unlimited")
