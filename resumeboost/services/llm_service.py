"""LLM text generation through an OpenAI-compatible router."""

import logging
from typing import Optional

from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from config.settings import (
    LLM_APP_REFERER,
    LLM_APP_TITLE,
    LLM_MAX_RETRIES,
    LLM_MODEL,
    LLM_TEMPERATURE,
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
)
from resumeboost.services.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)


class LLMService:
    """Wrapper for single-prompt completions."""

    def __init__(
        self,
        api_key: Optional[str] = OPENROUTER_API_KEY,
        model: str = LLM_MODEL,
        chat_model=None,
    ):
        """Initialize the chat client.

        Args:
            api_key: OpenRouter API key
            model: Model name as routed by OpenRouter
            chat_model: Pre-built LangChain chat model, used instead of ChatOpenAI

        Raises:
            ValueError: If no API key is configured and no chat model is given
        """
        if chat_model is not None:
            self.chat_model = chat_model
            self.model = model
            return

        if not api_key:
            raise ValueError("OPENROUTER_API_KEY not found in environment variables")

        # ChatOpenAI retries 429 and 5xx responses with exponential backoff.
        self.chat_model = ChatOpenAI(
            model=model,
            api_key=api_key,
            base_url=OPENROUTER_BASE_URL,
            temperature=LLM_TEMPERATURE,
            max_retries=LLM_MAX_RETRIES,
            default_headers={
                "HTTP-Referer": LLM_APP_REFERER,
                "X-Title": LLM_APP_TITLE,
            },
        )
        self.model = model

        logger.info(
            "LLM Service initialized with %s (temperature=%s, max_retries=%s)",
            model,
            LLM_TEMPERATURE,
            LLM_MAX_RETRIES,
        )

    def generate_text(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the reply text.

        Raises:
            ValidationError: If the prompt is empty
            UpstreamError: If the provider fails or returns no content
        """
        if not prompt or not prompt.strip():
            raise ValidationError("prompt is required")

        try:
            response = self.chat_model.invoke([HumanMessage(content=prompt)])
        except Exception as error:
            logger.error(f"Error generating text: {error}")
            raise UpstreamError(f"API request failed: {error}") from error

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        if not content or not content.strip():
            logger.error("LLM returned an empty completion")
            raise UpstreamError("No content in API response")

        logger.info("Generated %d characters with %s", len(content), self.model)
        return content
