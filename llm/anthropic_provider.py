"""Anthropic Claude provider implementation."""

import logging
import os

import anthropic
from anthropic import AsyncAnthropic

from core.errors import CollectorError

DEFAULT_MODEL = os.environ.get("SCORER_LLM_MODEL", "claude-sonnet-4-5-20250929")
DEFAULT_MAX_TOKENS = 4096

logger = logging.getLogger(__name__)


class AnthropicProvider:
    """Async access to Claude models for single-prompt completions."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        """Initialize the Anthropic provider.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            model: Model to use for completions
            max_tokens: Default response length cap
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable not set and no api_key provided"
            )
        self.model = model or DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.client = AsyncAnthropic(api_key=self.api_key)

    async def complete(self, prompt: str, max_tokens: int | None = None) -> str:
        logger.debug(f"LLM request to {self.model} ({len(prompt)} chars)")
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise CollectorError(f"LLM request failed: {e}") from e

        text = "".join(
            getattr(block, "text", "") or ""
            for block in response.content
            if block.type == "text"
        )
        logger.debug(f"LLM reply: {len(text)} chars, stop_reason={response.stop_reason}")
        return text
