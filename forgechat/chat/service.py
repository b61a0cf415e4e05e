"""Chat turn orchestration.

One user turn records the user's message, asks the reply provider for an
answer, and records the answer. A failed reply is recorded as an
assistant message too, so the transcript shows what the user saw.
"""

from forgechat.conversation.models import Conversation, Role
from forgechat.conversation.session_store import SessionStore
from forgechat.observability.logging import get_logger
from forgechat.providers.llm import ProviderError, ReplyProvider, to_llm_messages

logger = get_logger(__name__)

DEFAULT_ERROR_PREFIX = "Sorry, I encountered an error: "


class ChatService:
    """Runs user turns against the current conversation.

    Only one turn runs at a time; input submitted while a reply is pending
    is ignored, matching a disabled send button.
    """

    def __init__(
        self,
        store: SessionStore,
        provider: ReplyProvider,
        *,
        error_reply_prefix: str = DEFAULT_ERROR_PREFIX,
    ) -> None:
        self._store = store
        self._provider = provider
        self._error_reply_prefix = error_reply_prefix
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    async def send(self, text: str) -> Conversation | None:
        """Run one turn for `text` on the current conversation.

        Returns:
            The conversation after the assistant message was recorded, or
            None when the input was blank or a turn is already running.

        Raises:
            NoActiveConversationError: If there is no current conversation.
            NotFoundError: If the conversation disappeared mid-turn.
            BackendUnavailableError: If a message could not be stored.
        """
        content = text.strip()
        if not content:
            return None
        if self._busy:
            logger.info("send_ignored_while_busy")
            return None

        self._busy = True
        try:
            conversation = await self._store.add_message(Role.USER, content)
            reply = await self._generate(conversation)
            # Record on the conversation the turn started in, even if the
            # user switched away while the reply was generated
            return await self._store.add_message(
                Role.ASSISTANT,
                reply,
                target_id=conversation.id,
            )
        finally:
            self._busy = False

    async def _generate(self, conversation: Conversation) -> str:
        history = to_llm_messages(conversation.messages)
        try:
            return await self._provider.generate_reply(history)
        except ProviderError as e:
            logger.warning(
                "reply_generation_failed",
                conversation_id=conversation.id,
                provider=self._provider.provider_name,
                error=e.message,
            )
            return f"{self._error_reply_prefix}{e.message}"
        except Exception as e:
            logger.exception(
                "reply_generation_crashed",
                conversation_id=conversation.id,
                provider=self._provider.provider_name,
            )
            return f"{self._error_reply_prefix}{e}"
