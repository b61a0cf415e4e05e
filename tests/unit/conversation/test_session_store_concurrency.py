"""Concurrency tests for SessionStore.

FlakyAdapter gates and delays stand in for a slow remote backend, so the
interleavings here are deterministic.
"""

import asyncio

import pytest

from forgechat.conversation import EphemeralAdapter, NotFoundError, Role


async def settle() -> None:
    """Let every ready task run until it blocks."""
    for _ in range(10):
        await asyncio.sleep(0)


class TestAppendOrdering:
    """Tests for per-conversation append serialization."""

    @pytest.mark.asyncio
    async def test_back_to_back_appends_keep_issue_order(self, remote_store, flaky_adapter):
        # The first call is slow, the second is instant
        flaky_adapter.append_delays = [0.05, 0.0]

        await asyncio.gather(
            remote_store.add_message(Role.USER, "first"),
            remote_store.add_message(Role.ASSISTANT, "second"),
        )

        current = remote_store.current_conversation()
        assert [m.content for m in current.messages] == ["first", "second"]
        assert current.title == "first"

        [stored] = [c for c in await flaky_adapter.list() if c.id == current.id]
        assert [m.content for m in stored.messages] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_many_concurrent_appends_stay_ordered(self, remote_store, flaky_adapter):
        flaky_adapter.append_delays = [0.01 * (10 - i) for i in range(10)]

        await asyncio.gather(
            *(remote_store.add_message(Role.USER, f"m{i}") for i in range(10))
        )

        contents = [m.content for m in remote_store.current_conversation().messages]
        assert contents == [f"m{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_appends_to_different_conversations_are_independent(
        self, remote_store, flaky_adapter
    ):
        first = remote_store.current_conversation()
        await remote_store.add_message(Role.USER, "first")
        second = await remote_store.create_conversation()
        gate = flaky_adapter.hold("append")

        slow = asyncio.create_task(
            remote_store.add_message(Role.ASSISTANT, "slow", target_id=first.id)
        )
        await settle()
        assert not slow.done()

        # Another conversation's append is not queued behind the held one
        del flaky_adapter.gates["append"]
        updated = await remote_store.add_message(Role.USER, "fast", target_id=second.id)
        assert updated.message_count == 1
        assert not slow.done()

        gate.set()
        result = await slow
        assert [m.content for m in result.messages] == ["first", "slow"]


class TestAppendTarget:
    """Tests for where an in-flight append lands."""

    @pytest.mark.asyncio
    async def test_switch_during_append_does_not_redirect(self, remote_store, flaky_adapter):
        first = remote_store.current_conversation()
        await remote_store.add_message(Role.USER, "first")
        second = await remote_store.create_conversation()
        gate = flaky_adapter.hold("append")

        task = asyncio.create_task(remote_store.add_message(Role.USER, "for second"))
        await settle()
        remote_store.switch_conversation(first.id)
        gate.set()
        updated = await task

        assert updated.id == second.id
        assert remote_store.get_conversation(second.id).message_count == 1
        assert remote_store.get_conversation(first.id).message_count == 1
        assert remote_store.current_conversation().id == first.id

    @pytest.mark.asyncio
    async def test_delete_during_append_raises_not_found(self, remote_store, flaky_adapter):
        doomed = remote_store.current_conversation()
        await remote_store.add_message(Role.USER, "first")
        await remote_store.create_conversation()
        gate = flaky_adapter.hold("append")

        task = asyncio.create_task(
            remote_store.add_message(Role.ASSISTANT, "orphan", target_id=doomed.id)
        )
        await settle()
        await remote_store.delete_conversation(doomed.id)
        gate.set()

        with pytest.raises(NotFoundError):
            await task
        assert doomed.id not in [c.id for c in remote_store.list_conversations()]

    @pytest.mark.asyncio
    async def test_rebind_during_append_discards_result(self, remote_store, flaky_adapter):
        gate = flaky_adapter.hold("append")

        task = asyncio.create_task(remote_store.add_message(Role.USER, "old identity"))
        await settle()
        fresh = await remote_store.rebind(EphemeralAdapter())
        gate.set()

        with pytest.raises(NotFoundError):
            await task
        assert remote_store.list_conversations() == (fresh,)
        assert fresh.messages == ()


class TestPruningWithPendingAppends:
    """Tests for pruning while a first message is in flight."""

    @pytest.mark.asyncio
    async def test_pending_conversation_is_not_pruned(self, remote_store, flaky_adapter):
        pending = remote_store.current_conversation()
        gate = flaky_adapter.hold("append")

        task = asyncio.create_task(remote_store.add_message(Role.USER, "arriving"))
        await settle()
        fresh = await remote_store.create_conversation()
        gate.set()
        updated = await task

        assert updated.id == pending.id
        assert updated.title == "arriving"
        ids = [c.id for c in remote_store.list_conversations()]
        assert ids == [fresh.id, pending.id]
        assert flaky_adapter.calls_to("remove") == []


class TestSwitchDuringDelete:
    """Tests for switches made while a removal is in flight."""

    @staticmethod
    async def two_conversations(store) -> tuple:
        first = store.current_conversation()
        await store.add_message(Role.USER, "first")
        second = await store.create_conversation()
        await store.add_message(Role.USER, "second")
        return first, second

    @pytest.mark.asyncio
    async def test_cannot_switch_to_conversation_being_deleted(
        self, remote_store, flaky_adapter
    ):
        first, second = await self.two_conversations(remote_store)
        gate = flaky_adapter.hold("remove")

        task = asyncio.create_task(remote_store.delete_conversation(first.id))
        await settle()
        with pytest.raises(NotFoundError):
            remote_store.switch_conversation(first.id)
        gate.set()
        await task

        current = remote_store.current_conversation()
        assert current is not None
        assert current.id == second.id
        assert [c.id for c in remote_store.list_conversations()] == [second.id]

    @pytest.mark.asyncio
    async def test_delete_keeps_switch_made_while_pending(self, remote_store, flaky_adapter):
        first, second = await self.two_conversations(remote_store)
        third = await remote_store.create_conversation()
        await remote_store.add_message(Role.USER, "third")
        gate = flaky_adapter.hold("remove")

        task = asyncio.create_task(remote_store.delete_conversation(third.id))
        await settle()
        remote_store.switch_conversation(first.id)
        gate.set()
        current = await task

        # Replacement selection would have picked the newer `second`
        assert current.id == first.id
        assert remote_store.current_conversation().id == first.id
        assert [c.id for c in remote_store.list_conversations()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_clear_keeps_switch_and_discards_fresh(self, remote_store, flaky_adapter):
        first, second = await self.two_conversations(remote_store)
        gate = flaky_adapter.hold("remove")

        task = asyncio.create_task(remote_store.clear_current_conversation())
        await settle()
        remote_store.switch_conversation(first.id)
        gate.set()
        current = await task

        assert current.id == first.id
        assert [c.id for c in remote_store.list_conversations()] == [first.id]
        assert [c.id for c in await flaky_adapter.list()] == [first.id]
        # The fresh conversation was created, then removed again
        assert len(flaky_adapter.calls_to("create")) == 3


class TestShapeMutations:
    """Tests for serialization of create, delete and refresh."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_leave_one_current(self, remote_store):
        first, second = await asyncio.gather(
            remote_store.create_conversation(),
            remote_store.create_conversation(),
        )

        assert first.id != second.id
        assert remote_store.current_conversation() == second
        assert remote_store.list_conversations() == (second,)

    @pytest.mark.asyncio
    async def test_refresh_waits_for_create(self, remote_store, flaky_adapter):
        gate = flaky_adapter.hold("create")

        creating = asyncio.create_task(remote_store.create_conversation())
        await settle()
        refreshing = asyncio.create_task(remote_store.refresh())
        await settle()
        assert flaky_adapter.calls_to("list") == [("list",)]

        gate.set()
        created = await creating
        await refreshing

        assert remote_store.current_conversation().id == created.id
        assert len(flaky_adapter.calls_to("list")) == 2
