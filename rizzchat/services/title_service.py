"""Service for generating chat titles via LLM."""

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from rizzchat.services.completion_service import content_text

logger = structlog.get_logger()

TITLE_PROMPT = (
    "Generate a short, descriptive title (max 6 words) for a chat "
    "conversation based on the first user message. "
    "Focus on the main topic or question."
)
TITLE_TEMPERATURE = 0.5
TITLE_MAX_LENGTH = 255


class TitleService:
    """Summarises the opening user message into a chat title."""

    def __init__(self, llm: BaseChatModel, max_tokens: int = 20) -> None:
        self._llm = llm
        self._max_tokens = max_tokens

    async def generate_title(self, message: str, fallback: str) -> str:
        """Return a short title for ``message``, or ``fallback`` on any failure.

        Title generation never fails the caller: provider errors and empty
        replies both degrade to ``fallback``.
        """
        prompt = [SystemMessage(content=TITLE_PROMPT), HumanMessage(content=message)]
        try:
            response = await self._llm.ainvoke(
                prompt,
                max_tokens=self._max_tokens,
                temperature=TITLE_TEMPERATURE,
            )
        except Exception:
            logger.exception("Failed to generate chat title")
            return fallback

        title = content_text(response).strip().strip('"').strip()
        return title[:TITLE_MAX_LENGTH] or fallback
