"""Chat turns: user message, generated reply, assistant message."""

from forgechat.chat.service import DEFAULT_ERROR_PREFIX, ChatService

__all__ = ["ChatService", "DEFAULT_ERROR_PREFIX"]
