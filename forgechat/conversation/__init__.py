"""Conversation session core.

SessionStore owns the user's conversations and the current pointer;
backing adapters persist them either in-process or through the remote
conversation API.
"""

from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.adapters import EphemeralAdapter, PersistedAdapter
from forgechat.conversation.errors import (
    BackendUnavailableError,
    ConversationError,
    NoActiveConversationError,
    NotFoundError,
)
from forgechat.conversation.identity import Identity, IdentityBinding
from forgechat.conversation.models import (
    Conversation,
    ConversationSummary,
    Message,
    Role,
)
from forgechat.conversation.session_store import SessionStore, select_replacement

__all__ = [
    # Store
    "SessionStore",
    "select_replacement",
    # Adapters
    "BackingAdapter",
    "EphemeralAdapter",
    "PersistedAdapter",
    # Identity
    "Identity",
    "IdentityBinding",
    # Models
    "Conversation",
    "ConversationSummary",
    "Message",
    "Role",
    # Errors
    "BackendUnavailableError",
    "ConversationError",
    "NoActiveConversationError",
    "NotFoundError",
]
