"""Conversation domain models.

Contains the Pydantic models shared by the session store and every
backing adapter:
- Conversations and their messages
- History summaries
- Title derivation helpers
"""

from forgechat.conversation.models.conversation import (
    ELLIPSIS,
    PLACEHOLDER_TITLE,
    PREVIEW_LENGTH,
    TITLE_MAX_LENGTH,
    Conversation,
    ConversationSummary,
    Message,
    derive_title,
    summarize,
    truncate,
    utc_now,
)
from forgechat.conversation.models.enums import Role

__all__ = [
    # Enums
    "Role",
    # Models
    "Conversation",
    "ConversationSummary",
    "Message",
    # Helpers
    "derive_title",
    "summarize",
    "truncate",
    "utc_now",
    # Constants
    "ELLIPSIS",
    "PLACEHOLDER_TITLE",
    "PREVIEW_LENGTH",
    "TITLE_MAX_LENGTH",
]
