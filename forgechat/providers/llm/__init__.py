"""Reply providers for assistant message generation.

The chat service depends only on ReplyProvider. Prompt construction and
model selection live behind concrete providers.
"""

from forgechat.providers.llm.base import (
    AuthenticationError,
    ContentFilterError,
    LLMMessage,
    ModelError,
    ProviderError,
    RateLimitError,
    ReplyProvider,
    to_llm_messages,
)
from forgechat.providers.llm.mock import MockReplyProvider

__all__ = [
    "AuthenticationError",
    "ContentFilterError",
    "LLMMessage",
    "MockReplyProvider",
    "ModelError",
    "ProviderError",
    "RateLimitError",
    "ReplyProvider",
    "to_llm_messages",
]
