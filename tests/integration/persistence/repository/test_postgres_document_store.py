"""Integration tests for the PostgreSQL document store and rate limits.

Run with ``pytest -m integration`` against a migrated database.
"""

import asyncio
from datetime import datetime
from uuid import uuid4

import pytest

from clubhouse.domain.model import RateLimitRecord
from clubhouse.domain.repository import (
    CommentRepository,
    DocumentStore,
    RateLimitRepository,
)
from clubhouse.domain.value import ActionKind, FieldFilter, OrderBy, UserId
from clubhouse.persistence.error import DocumentNotFoundError
from tests.conftest import make_comment
from tests.harness import create_env_fixture

pytestmark = pytest.mark.integration

# Integration test fixture - real PostgreSQL
integration_env = create_env_fixture(unmock={"persistence"})


def unique_collection() -> str:
    return f"test_{uuid4().hex}"


class TestPostgresDocumentStore:
    """Tests for PostgresDocumentStore."""

    @pytest.mark.asyncio
    async def test_create_get_and_atomic_increment(self, integration_env):
        # Arrange
        store = await integration_env.get(DocumentStore)
        collection = unique_collection()
        doc_id = await store.create(collection, {"views": 0, "at": datetime.now()})

        # Act
        await asyncio.gather(
            *(store.increment_field(collection, doc_id, "views", 1) for _ in range(10))
        )

        # Assert
        document = await store.get(collection, doc_id)
        assert document.fields["views"] == 10
        assert isinstance(document.fields["at"], str)

    @pytest.mark.asyncio
    async def test_update_of_missing_document_raises(self, integration_env):
        store = await integration_env.get(DocumentStore)

        with pytest.raises(DocumentNotFoundError):
            await store.update(unique_collection(), "missing", {"a": 1})

    @pytest.mark.asyncio
    async def test_subscription_sees_writes(self, integration_env):
        store = await integration_env.get(DocumentStore)
        collection = unique_collection()

        async with await store.subscribe(
            collection,
            [FieldFilter(field="live", value=True)],
            [OrderBy(field="rank")],
        ) as subscription:
            first = await subscription.__anext__()
            await store.set(collection, "b", {"live": True, "rank": 2})
            await store.set(collection, "a", {"live": True, "rank": 1})
            await store.set(collection, "x", {"live": False, "rank": 0})

            snapshot = await asyncio.wait_for(subscription.__anext__(), timeout=5)
            while len(snapshot.documents) < 2:
                snapshot = await asyncio.wait_for(subscription.__anext__(), timeout=5)

        assert first.documents == ()
        assert [d.id for d in snapshot.documents] == ["a", "b"]


class TestDocumentCommentRepositoryOnPostgres:
    """CommentRepository over the PostgreSQL store."""

    @pytest.mark.asyncio
    async def test_comment_round_trip(self, integration_env):
        comment_repo = await integration_env.get(CommentRepository)
        comment = make_comment("ignored", post_id=f"post-{uuid4().hex}")

        comment_id = await comment_repo.create(comment)
        await comment_repo.add_liker(comment.post_id, comment_id, UserId("carol"))

        stored = await comment_repo.find_by_id(comment.post_id, comment_id)
        assert stored.content == comment.content
        assert stored.created_at == comment.created_at
        assert stored.liked_by_user_ids == ("carol",)


class TestPostgresRateLimitRepository:
    """Tests for PostgresRateLimitRepository."""

    @pytest.mark.asyncio
    async def test_save_is_an_upsert(self, integration_env):
        repo = await integration_env.get(RateLimitRepository)
        user_id = UserId(f"user-{uuid4().hex}")

        await repo.save(RateLimitRecord(
            user_id=user_id,
            action=ActionKind.COMMENT,
            last_action_at=datetime(2026, 5, 1, 9, 0, 0),
        ))
        await repo.save(RateLimitRecord(
            user_id=user_id,
            action=ActionKind.COMMENT,
            last_action_at=datetime(2026, 5, 1, 9, 5, 0),
        ))

        record = await repo.find(user_id, ActionKind.COMMENT)
        assert record.last_action_at == datetime(2026, 5, 1, 9, 5, 0)
        assert await repo.find(user_id, ActionKind.POST) is None
