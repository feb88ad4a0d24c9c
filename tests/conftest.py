import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


class FakeLLM:
    """LLM stand-in that answers from canned replies keyed by a prompt substring."""

    def __init__(self, replies=None, default=None):
        self.replies = dict(replies or {})
        self.default = default
        self.prompts = []

    async def complete(self, prompt, max_tokens=None):
        self.prompts.append(prompt)
        for marker, reply in self.replies.items():
            if marker in prompt:
                if isinstance(reply, Exception):
                    raise reply
                return reply
        if self.default is None:
            raise AssertionError(f"Unexpected prompt: {prompt[:80]!r}")
        return self.default


@pytest.fixture
def fake_llm():
    """Factory: fake_llm({"marker": "reply"}, default=None)."""
    return FakeLLM
