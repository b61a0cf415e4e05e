"""Remote implementation of BackingAdapter.

Stores conversations through the Forge conversation REST API. Identifiers
are issued by the server; every call is an HTTP round trip that may fail.
"""

from datetime import UTC

from forgechat.client import ConversationRecord, ForgeClient, ForgeClientError, MessageRecord
from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.errors import (
    BackendUnavailableError,
    ConversationError,
    NotFoundError,
)
from forgechat.conversation.models import Conversation, Message, Role
from forgechat.observability.logging import get_logger

logger = get_logger(__name__)


def _to_message(record: MessageRecord) -> Message:
    created_at = record.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return Message(
        id=record.id,
        role=Role(record.role),
        content=record.content,
        created_at=created_at,
    )


def _to_conversation(record: ConversationRecord) -> Conversation:
    created_at = record.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    # Keep the server's insertion order
    messages = [_to_message(m) for m in record.messages]
    return Conversation(
        id=record.id,
        title=record.title,
        messages=tuple(messages),
        created_at=created_at,
    )


class PersistedAdapter(BackingAdapter):
    """BackingAdapter over the remote conversation API.

    Translates ForgeClientError into the conversation error hierarchy:
    HTTP 404 becomes NotFoundError, anything else BackendUnavailableError.
    """

    def __init__(self, client: ForgeClient) -> None:
        """Initialize persisted adapter.

        Args:
            client: API client authenticated as the signed-in user
        """
        self._client = client

    def _translate(
        self,
        e: ForgeClientError,
        operation: str,
        conversation_id: str | None = None,
    ) -> ConversationError:
        logger.error(
            "conversation_api_error",
            operation=operation,
            conversation_id=conversation_id,
            status_code=e.status_code,
            error=e.message,
        )
        if e.status_code == 404 and conversation_id is not None:
            return NotFoundError(conversation_id, cause=e)
        return BackendUnavailableError(f"Failed to {operation}: {e.message}", cause=e)

    async def list(self) -> list[Conversation]:
        try:
            records = await self._client.list_conversations()
        except ForgeClientError as e:
            raise self._translate(e, "list conversations") from e

        # Listed in creation order; reversed so equal timestamps stay newest first
        conversations = [_to_conversation(r) for r in reversed(records)]
        conversations.sort(key=lambda c: c.created_at, reverse=True)
        logger.debug("conversations_listed", count=len(conversations))
        return conversations

    async def create(self, title: str) -> Conversation:
        try:
            record = await self._client.create_conversation(title)
        except ForgeClientError as e:
            raise self._translate(e, "create conversation") from e

        logger.debug("conversation_created", conversation_id=record.id)
        # A freshly created conversation never carries messages
        return _to_conversation(record).model_copy(update={"messages": ()})

    async def append(
        self,
        conversation_id: str,
        role: Role,
        content: str,
        *,
        title: str | None = None,
    ) -> Message:
        try:
            record = await self._client.append_message(
                conversation_id,
                role.value,
                content,
                title=title,
            )
        except ForgeClientError as e:
            raise self._translate(e, "append message", conversation_id) from e

        logger.debug(
            "message_appended",
            conversation_id=conversation_id,
            message_id=record.id,
            role=role.value,
        )
        return _to_message(record)

    async def remove(self, conversation_id: str) -> None:
        try:
            await self._client.delete_conversation(conversation_id)
        except ForgeClientError as e:
            raise self._translate(e, "delete conversation", conversation_id) from e

        logger.debug("conversation_removed", conversation_id=conversation_id)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
