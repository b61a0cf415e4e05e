"""Conversation error hierarchy.

SessionStore and every backing adapter raise these errors so callers can
handle failures the same way in ephemeral and persisted mode.
"""


class ConversationError(Exception):
    """Base exception for all conversation errors.

    Adapters wrap transport or backend specific errors in one of the
    subclasses and keep the original exception as `cause`.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class NotFoundError(ConversationError):
    """Raised when a referenced conversation does not exist.

    Non-fatal: the UI is expected to no-op or show a notice.
    """

    def __init__(
        self,
        conversation_id: str,
        message: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message or f"Conversation not found: {conversation_id}", cause)
        self.conversation_id = conversation_id


class NoActiveConversationError(ConversationError):
    """Raised when an operation needs a current conversation and there is none.

    This is a caller contract violation; the pending action fails rather than
    dropping the message.
    """

    def __init__(self, message: str = "No current conversation to add message to") -> None:
        super().__init__(message)


class BackendUnavailableError(ConversationError):
    """Raised when the backing store cannot be reached or rejects a call.

    Local state is left exactly as it was before the failing operation;
    the user may retry.
    """

    pass
