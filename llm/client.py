"""LLM provider abstraction layer.

The rest of the application only needs prompt-in, text-out completions, so
any backend that implements ``complete`` can be swapped in (tests use a fake
provider returning canned text).
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol defining the interface for LLM providers."""

    async def complete(self, prompt: str, max_tokens: int | None = None) -> str:
        """Send a single-turn prompt and return the raw reply text.

        Args:
            prompt: User prompt
            max_tokens: Optional response length cap (provider default if None)

        Returns:
            Concatenated text of the reply

        Raises:
            CollectorError: if the provider request fails
        """
        ...
