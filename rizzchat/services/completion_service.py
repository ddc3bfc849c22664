"""Chat completion over the configured LangChain chat model."""

import asyncio
from collections.abc import Sequence

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from rizzchat.core.exceptions import GenerationFailedError
from rizzchat.schemas.chat_schema import ChatMessage

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are RizzGPT, an AI-powered dating and relationship assistant. "
    "You provide helpful, respectful, and practical advice about dating, "
    "relationships, social interactions, and communication skills.\n\n"
    "Your responses should be:\n"
    "- Supportive and encouraging\n"
    "- Practical and actionable\n"
    "- Respectful and appropriate\n"
    "- Focused on building genuine connections\n"
    "- Emphasizing consent, respect, and healthy relationships\n\n"
    "Avoid:\n"
    '- Manipulative tactics or "pickup artist" techniques\n'
    "- Disrespectful or objectifying language\n"
    "- Encouraging dishonesty or deception\n"
    "- Inappropriate or explicit content\n\n"
    "Keep responses conversational and helpful, like a knowledgeable friend "
    "giving advice."
)


def content_text(message: BaseMessage) -> str:
    """Plain text of a model reply, flattening provider content blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


def to_langchain_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    """Convert stored turns to LangChain messages, preserving order."""
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == "user":
            converted.append(HumanMessage(content=message.content))
        else:
            converted.append(AIMessage(content=message.content))
    return converted


class CompletionService:
    """Generates assistant replies for a conversation transcript."""

    def __init__(self, llm: BaseChatModel, timeout_seconds: float | None = None) -> None:
        self._llm = llm
        self._timeout = timeout_seconds

    async def generate_reply(self, messages: Sequence[ChatMessage]) -> str:
        """Reply to ``messages`` (oldest first, ending with the new user turn).

        Raises:
            GenerationFailedError: the provider failed, timed out, or
                returned an empty reply.
        """
        prompt = [SystemMessage(content=SYSTEM_PROMPT), *to_langchain_messages(messages)]
        try:
            response = await asyncio.wait_for(
                self._llm.ainvoke(prompt), timeout=self._timeout
            )
        except Exception as exc:
            logger.exception("Chat completion failed", turns=len(messages))
            raise GenerationFailedError from exc

        reply = content_text(response).strip()
        if not reply:
            logger.warning("Chat completion returned empty content", turns=len(messages))
            raise GenerationFailedError
        return reply
