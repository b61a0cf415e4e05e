"""Reply generation interface, data models and error types.

This module provides the types shared by every reply provider:
- LLMMessage: Input message format
- ReplyProvider: Abstract "produce reply content for a conversation"
- Error types for different failure modes
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel, Field

from forgechat.conversation.models import Message


class LLMMessage(BaseModel):
    """A message in a conversation history."""

    role: str = Field(..., description="Role: user or assistant")
    content: str = Field(..., description="Message content")


def to_llm_messages(messages: Iterable[Message]) -> list[LLMMessage]:
    """Convert conversation messages to provider input, preserving order."""
    return [LLMMessage(role=m.role.value, content=m.content) for m in messages]


# ============================================================================
# Error Types
# ============================================================================


class ProviderError(Exception):
    """Base exception for reply generation errors.

    `message` is safe to show to the user.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(ProviderError):
    """Invalid or missing API key."""

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    pass


class ModelError(ProviderError):
    """Model not found or unavailable."""

    pass


class ContentFilterError(ProviderError):
    """Content blocked by safety filter."""

    pass


class ReplyProvider(ABC):
    """Produces the assistant's reply for a conversation history."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def generate_reply(self, history: list[LLMMessage]) -> str:
        """Generate reply text for `history`, oldest message first.

        Raises:
            ProviderError: With a user-displayable message on failure.
        """
        pass
