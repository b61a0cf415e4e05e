"""Mock reply provider for testing."""

from typing import Any

from forgechat.providers.llm.base import LLMMessage, ProviderError, ReplyProvider


class MockReplyProvider(ReplyProvider):
    """Mock reply provider for testing.

    Returns configurable responses without making actual API calls.
    Useful for unit testing and development.
    """

    def __init__(
        self,
        default_response: str = "Mock response",
        responses: dict[str, str] | None = None,
        error: ProviderError | None = None,
    ):
        """Initialize mock provider.

        Args:
            default_response: Response to return when no match found
            responses: Dict mapping last message content to responses
            error: Raised from every call instead of replying, when set
        """
        self._default_response = default_response
        self._responses = responses or {}
        self._error = error
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def clear_history(self) -> None:
        self._call_history.clear()

    def set_response(self, trigger: str, response: str) -> None:
        """Set a response for a specific message content."""
        self._responses[trigger] = response

    def set_error(self, error: ProviderError | None) -> None:
        """Fail every following call with `error` (None to stop failing)."""
        self._error = error

    async def generate_reply(self, history: list[LLMMessage]) -> str:
        self._call_history.append({"history": list(history)})

        if self._error is not None:
            raise self._error

        if history and history[-1].content in self._responses:
            return self._responses[history[-1].content]
        return self._default_response
