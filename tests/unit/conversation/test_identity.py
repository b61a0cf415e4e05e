"""Tests for IdentityBinding."""

from unittest.mock import AsyncMock

import pytest

from forgechat.conversation import (
    BackendUnavailableError,
    BackingAdapter,
    Conversation,
    EphemeralAdapter,
    Identity,
    IdentityBinding,
    Role,
    SessionStore,
)
from tests.factories import FlakyAdapter


class RecordingFactory:
    """Adapter factory that hands out a fresh adapter per identity."""

    def __init__(self, adapter_class=EphemeralAdapter) -> None:
        self.adapter_class = adapter_class
        self.built: list[tuple[Identity, EphemeralAdapter]] = []

    def __call__(self, identity: Identity) -> EphemeralAdapter:
        adapter = self.adapter_class()
        self.built.append((identity, adapter))
        return adapter


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def binding(factory) -> IdentityBinding:
    return IdentityBinding(SessionStore(), factory)


class TestIdentityBinding:
    """Tests for rebinding the store on identity changes."""

    @pytest.mark.asyncio
    async def test_starts_signed_out(self, binding):
        assert binding.identity is None

    @pytest.mark.asyncio
    async def test_sign_in_seeds_store(self, binding, factory):
        alice = Identity(user_id="1", token="token-a")

        current = await binding.set_identity(alice)

        assert binding.identity == alice
        assert current is not None
        assert factory.built[0][0] == alice
        assert factory.built[0][1] is binding._store.adapter

    @pytest.mark.asyncio
    async def test_switching_user_discards_conversations(self, binding):
        await binding.set_identity(Identity(user_id="1"))
        store = binding._store
        await store.add_message(Role.USER, "alice's secret")

        current = await binding.set_identity(Identity(user_id="2"))

        assert store.list_conversations() == (current,)
        assert current.messages == ()

    @pytest.mark.asyncio
    async def test_sign_out_empties_store(self, binding):
        await binding.set_identity(Identity(user_id="1"))
        store = binding._store

        result = await binding.set_identity(None)

        assert result is None
        assert store.list_conversations() == ()
        assert store.current_conversation() is None
        assert store.adapter is None

    @pytest.mark.asyncio
    async def test_same_identity_is_noop(self, binding, factory):
        alice = Identity(user_id="1", token="token-a")
        first = await binding.set_identity(alice)
        await binding._store.add_message(Role.USER, "keep me")

        current = await binding.set_identity(Identity(user_id="1", token="token-a"))

        assert len(factory.built) == 1
        assert current.id == first.id
        assert current.message_count == 1

    @pytest.mark.asyncio
    async def test_previous_adapter_closed(self, binding, factory, monkeypatch):
        await binding.set_identity(Identity(user_id="1"))
        previous = factory.built[0][1]
        close = AsyncMock()
        monkeypatch.setattr(previous, "close", close)

        await binding.set_identity(Identity(user_id="2"))

        close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sign_out_closes_adapter(self):
        adapter = AsyncMock(spec=BackingAdapter)
        adapter.list.return_value = []
        adapter.create.return_value = Conversation(id="conv-1")
        binding = IdentityBinding(SessionStore(), lambda identity: adapter)
        await binding.set_identity(Identity(user_id="1"))

        await binding.set_identity(None)

        adapter.close.assert_awaited_once()
        assert binding.identity is None

    @pytest.mark.asyncio
    async def test_seed_failure_keeps_identity_and_allows_retry(self):
        adapter = FlakyAdapter()
        adapter.fail("list")
        binding = IdentityBinding(SessionStore(), lambda identity: adapter)
        alice = Identity(user_id="1")

        with pytest.raises(BackendUnavailableError):
            await binding.set_identity(alice)

        assert binding.identity == alice
        store = binding._store
        assert store.current_conversation() is None

        adapter.recover()
        await store.initialize()
        assert store.current_conversation() is not None
