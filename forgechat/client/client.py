"""Forge conversation API client.

Provides an async client for the conversation/message REST endpoints used
by the persisted backing adapter.

Usage:
    from forgechat.client import ForgeClient

    async with ForgeClient(base_url="https://forge.example.com", token="eyJ...") as client:
        conversation = await client.create_conversation("New Conversation")
        await client.append_message(conversation.id, "user", "Hello!")
"""

from typing import Any

import httpx

from forgechat.client.models import (
    ConversationCreate,
    ConversationRecord,
    MessageCreate,
    MessageRecord,
)


class ForgeClientError(Exception):
    """Base exception for client errors.

    `status_code` is None when the request never got a response
    (connection refused, timeout, protocol error).
    """

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class ForgeClient:
    """Async client for the Forge conversation API.

    Attributes:
        base_url: Base URL of the API
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the API
            token: Bearer token of the signed-in user
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ForgeClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        """Make an API request."""
        try:
            response = await self._client.request(
                method=method,
                url=path,
                headers=self._headers(),
                json=json,
                params=params,
            )
        except httpx.HTTPError as e:
            raise ForgeClientError(
                message=f"{method} {path} failed: {e}",
                details={"exception": type(e).__name__},
            ) from e

        if response.status_code >= 400:
            error_data: Any = None
            try:
                error_data = response.json()
                message = error_data.get("error", {}).get("message", response.text)
            except (ValueError, AttributeError):
                message = response.text

            raise ForgeClientError(
                message=message or f"HTTP {response.status_code}",
                status_code=response.status_code,
                details=error_data,
            )

        if response.status_code == 204 or not response.content:
            return {}

        return response.json()

    # Conversations
    async def list_conversations(self) -> list[ConversationRecord]:
        """List the signed-in user's conversations with their messages."""
        data = await self._request("GET", "/api/conversations")
        return [
            ConversationRecord.model_validate(c)
            for c in data.get("conversations", [])
        ]

    async def create_conversation(self, title: str) -> ConversationRecord:
        """Create an empty conversation."""
        payload = ConversationCreate(title=title)
        data = await self._request(
            "POST",
            "/api/conversations",
            json=payload.model_dump(),
        )
        return ConversationRecord.model_validate(data)

    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation and its messages."""
        await self._request("DELETE", f"/api/conversations/{conversation_id}")

    # Messages
    async def append_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        *,
        title: str | None = None,
    ) -> MessageRecord:
        """Append a message to a conversation."""
        payload = MessageCreate(role=role, content=content, title=title)
        data = await self._request(
            "POST",
            f"/api/conversations/{conversation_id}/messages",
            json=payload.model_dump(exclude_none=True),
        )
        return MessageRecord.model_validate(data)
