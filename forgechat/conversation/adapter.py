"""BackingAdapter abstract interface."""

from abc import ABC, abstractmethod

from forgechat.conversation.models import Conversation, Message, Role


class BackingAdapter(ABC):
    """Abstract interface for conversation persistence.

    Each method maps to one SessionStore mutation. Adapters generate or
    receive identifiers and store what they are given; title derivation,
    pruning and current-conversation selection belong to SessionStore.

    Implementations raise NotFoundError for an unknown conversation and
    BackendUnavailableError for I/O failures.
    """

    @abstractmethod
    async def list(self) -> list[Conversation]:
        """List every conversation in the backing space, with messages."""
        pass

    @abstractmethod
    async def create(self, title: str) -> Conversation:
        """Create an empty conversation with the given title."""
        pass

    @abstractmethod
    async def append(
        self,
        conversation_id: str,
        role: Role,
        content: str,
        *,
        title: str | None = None,
    ) -> Message:
        """Append a message, storing `title` alongside it when given.

        Must fail without writing anything if the conversation is missing.
        """
        pass

    @abstractmethod
    async def remove(self, conversation_id: str) -> None:
        """Remove a conversation and all of its messages."""
        pass

    async def close(self) -> None:
        """Release resources held by the adapter (no-op by default)."""
        return None
