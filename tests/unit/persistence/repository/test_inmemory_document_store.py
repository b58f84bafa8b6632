"""Unit tests for InMemoryDocumentStore and Subscription."""

import asyncio

import pytest

from clubhouse.domain.value import FieldFilter, OrderBy, ServerTimestamp
from clubhouse.persistence.error import DocumentNotFoundError
from clubhouse.persistence.repository.inmemory import InMemoryDocumentStore
from tests.doubles import FakeClock

ROUNDS = "rounds"


class TestWrites:
    """Tests for create, set, get, update and delete."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_stamps_times(self):
        clock = FakeClock()
        store = InMemoryDocumentStore(clock)

        doc_id = await store.create(ROUNDS, {"score": 72})
        document = await store.get(ROUNDS, doc_id)

        assert document.fields == {"score": 72}
        assert document.create_time == clock.now

    @pytest.mark.asyncio
    async def test_update_merges_and_keeps_create_time(self):
        clock = FakeClock()
        store = InMemoryDocumentStore(clock)
        await store.set(ROUNDS, "r1", {"score": 72, "course": "Pebble"})
        created = clock.now
        clock.advance(10)

        await store.update(ROUNDS, "r1", {"score": 70, "editedAt": ServerTimestamp()})

        document = await store.get(ROUNDS, "r1")
        assert document.fields == {"score": 70, "course": "Pebble", "editedAt": clock.now}
        assert document.create_time == created
        assert document.update_time == clock.now

    @pytest.mark.asyncio
    async def test_update_of_missing_document_raises(self):
        store = InMemoryDocumentStore()

        with pytest.raises(DocumentNotFoundError):
            await store.update(ROUNDS, "missing", {"score": 1})

    @pytest.mark.asyncio
    async def test_get_returns_a_copy(self):
        store = InMemoryDocumentStore()
        await store.set(ROUNDS, "r1", {"holes": [1, 2]})

        document = await store.get(ROUNDS, "r1")
        document.fields["holes"].append(3)

        assert (await store.get(ROUNDS, "r1")).fields["holes"] == [1, 2]

    @pytest.mark.asyncio
    async def test_delete_missing_document_is_a_no_op(self):
        store = InMemoryDocumentStore()

        await store.delete(ROUNDS, "missing")

        assert await store.get(ROUNDS, "missing") is None

    @pytest.mark.asyncio
    async def test_concurrent_increments_all_apply(self):
        store = InMemoryDocumentStore()
        await store.set(ROUNDS, "r1", {"views": 0})

        await asyncio.gather(
            *(store.increment_field(ROUNDS, "r1", "views", 1) for _ in range(20))
        )

        assert (await store.get(ROUNDS, "r1")).fields["views"] == 20


class TestSubscribe:
    """Tests for subscriptions."""

    @pytest.mark.asyncio
    async def test_current_contents_arrive_first_then_changes(self):
        # Arrange
        store = InMemoryDocumentStore()
        await store.set(ROUNDS, "r1", {"score": 72})

        # Act
        async with await store.subscribe(ROUNDS) as subscription:
            first = await subscription.__anext__()
            await store.set(ROUNDS, "r2", {"score": 68})
            second = await subscription.__anext__()

        # Assert
        assert [d.id for d in first.documents] == ["r1"]
        assert [d.id for d in second.documents] == ["r1", "r2"]
        assert second.revision > first.revision

    @pytest.mark.asyncio
    async def test_filters_and_order_apply_to_every_snapshot(self):
        store = InMemoryDocumentStore()
        subscription = await store.subscribe(
            ROUNDS,
            [FieldFilter(field="public", value=True)],
            [OrderBy(field="score")],
        )
        await subscription.__anext__()

        await store.set(ROUNDS, "a", {"public": True, "score": 75})
        await store.set(ROUNDS, "b", {"public": False, "score": 60})
        await store.set(ROUNDS, "c", {"public": True, "score": 70})

        snapshot = await subscription.__anext__()
        assert [d.id for d in snapshot.documents] == ["c", "a"]
        subscription.close()

    @pytest.mark.asyncio
    async def test_backlog_is_coalesced_to_newest_snapshot(self):
        store = InMemoryDocumentStore()
        subscription = await store.subscribe(ROUNDS)

        await store.set(ROUNDS, "a", {})
        await store.set(ROUNDS, "b", {})

        snapshot = await subscription.__anext__()
        assert [d.id for d in snapshot.documents] == ["a", "b"]
        subscription.close()

    @pytest.mark.asyncio
    async def test_close_detaches_and_ends_iteration(self):
        store = InMemoryDocumentStore()
        subscription = await store.subscribe(ROUNDS)
        assert store.subscriber_count(ROUNDS) == 1

        subscription.close()
        subscription.close()
        await store.set(ROUNDS, "a", {})

        assert store.subscriber_count(ROUNDS) == 0
        assert [s async for s in subscription] == []

    @pytest.mark.asyncio
    async def test_other_collections_do_not_notify(self):
        store = InMemoryDocumentStore()
        subscription = await store.subscribe(ROUNDS)
        initial = await subscription.__anext__()

        await store.set("scores", "s1", {})
        await store.set(ROUNDS, "r1", {})

        snapshot = await subscription.__anext__()
        assert snapshot.revision == initial.revision + 1
        subscription.close()
