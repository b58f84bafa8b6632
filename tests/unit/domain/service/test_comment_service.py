"""Unit tests for CommentService."""

import pytest

from clubhouse.domain.error import (
    BusinessRuleViolationError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from clubhouse.domain.repository import CommentRepository, DocumentStore
from clubhouse.domain.service import CommentService, CounterService
from clubhouse.domain.value import CommentId, PostId, UserId
from clubhouse.persistence.error import PersistenceError
from clubhouse.persistence.mappers import POSTS_COLLECTION, comments_collection
from clubhouse.persistence.repository import DocumentCommentRepository
from tests.conftest import seed_post
from tests.doubles import FlakyDocumentStore
from tests.harness import create_env_fixture

# Unit test fixture - everything in memory
unit_env = create_env_fixture()

POST = PostId("post-1")
ALICE = UserId("alice")
BOB = UserId("bob")


class TestCreateComment:
    """Tests for create_comment method."""

    @pytest.mark.asyncio
    async def test_create_top_level_comment_with_depth_zero(self, unit_env):
        """Top-level comment should have depth 0 and bump the post counter."""
        # Arrange
        comment_service = await unit_env.get(CommentService)
        comment_repo = await unit_env.get(CommentRepository)
        await seed_post(await unit_env.get(DocumentStore), author="pat")

        # Act
        result = await comment_service.create_comment(
            post_id=POST, author_id=ALICE, text="  Great round!  ", client_token="tok"
        )

        # Assert
        assert result.depth == 0
        assert result.parent_id is None
        assert result.content == "Great round!"
        assert result.is_pending is False

        saved = await comment_repo.find_by_id(POST, result.id)
        assert saved.content == "Great round!"
        assert saved.post_author_id == "pat"
        assert saved.client_token == "tok"

        post = await comment_repo.find_post(POST)
        assert post.comment_count == 1

    @pytest.mark.asyncio
    async def test_reply_increments_depth_and_parent_reply_count(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment_repo = await unit_env.get(CommentRepository)
        await seed_post(await unit_env.get(DocumentStore))
        parent = await comment_service.create_comment(POST, ALICE, "Great round!")

        reply = await comment_service.create_comment(
            POST, BOB, "Thanks!", parent_id=parent.id
        )

        assert reply.depth == 1
        assert reply.parent_id == parent.id
        assert reply.parent_author_id == ALICE

        stored_parent = await comment_repo.find_by_id(POST, parent.id)
        assert stored_parent.reply_count == 1
        post = await comment_repo.find_post(POST)
        assert post.comment_count == 2

    @pytest.mark.asyncio
    async def test_nested_reply_depth(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        await seed_post(await unit_env.get(DocumentStore))
        a = await comment_service.create_comment(POST, ALICE, "a")
        b = await comment_service.create_comment(POST, BOB, "b", parent_id=a.id)

        c = await comment_service.create_comment(POST, ALICE, "c", parent_id=b.id)

        assert c.depth == 2

    @pytest.mark.asyncio
    async def test_missing_parent_raises(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        await seed_post(await unit_env.get(DocumentStore))

        with pytest.raises(NotFoundError):
            await comment_service.create_comment(
                POST, ALICE, "Hello", parent_id=CommentId("missing")
            )

    @pytest.mark.asyncio
    async def test_missing_post_raises(self, unit_env):
        comment_service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError, match="Post"):
            await comment_service.create_comment(POST, ALICE, "Hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "x" * 501])
    async def test_invalid_text_raises_before_any_write(self, unit_env, text):
        comment_service = await unit_env.get(CommentService)
        comment_repo = await unit_env.get(CommentRepository)
        await seed_post(await unit_env.get(DocumentStore))

        with pytest.raises(ValidationError):
            await comment_service.create_comment(POST, ALICE, text)

        assert await comment_repo.find_by_post(POST) == []

    @pytest.mark.asyncio
    async def test_counter_failure_withdraws_the_comment(self):
        """A create whose counters cannot be updated leaves no live record."""
        # Arrange
        store = FlakyDocumentStore()
        comment_repo = DocumentCommentRepository(store)
        comment_service = CommentService(comment_repo, CounterService(comment_repo))
        await seed_post(store)
        parent = await comment_service.create_comment(POST, ALICE, "parent")
        store.fail("update", POSTS_COLLECTION)

        # Act
        with pytest.raises(PersistenceError):
            await comment_service.create_comment(POST, BOB, "reply", parent_id=parent.id)

        # Assert
        live = await comment_repo.find_by_post(POST)
        assert [c.id for c in live] == [parent.id]
        stored_parent = await comment_repo.find_by_id(POST, parent.id)
        assert stored_parent.reply_count == 0
        post = await comment_repo.find_post(POST)
        assert post.comment_count == 1
        assert ("update", comments_collection(POST)) in store.attempts


class TestUpdateContent:
    """Tests for update_content."""

    @pytest.mark.asyncio
    async def test_author_can_edit_without_touching_counters(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment_repo = await unit_env.get(CommentRepository)
        await seed_post(await unit_env.get(DocumentStore))
        comment = await comment_service.create_comment(POST, ALICE, "Par on 3")

        updated = await comment_service.update_content(
            POST, comment.id, ALICE, "Birdie on 3"
        )

        assert updated.id == comment.id
        assert updated.content == "Birdie on 3"
        stored = await comment_repo.find_by_id(POST, comment.id)
        assert stored.content == "Birdie on 3"
        assert stored.updated_at is not None
        post = await comment_repo.find_post(POST)
        assert post.comment_count == 1

    @pytest.mark.asyncio
    async def test_non_author_cannot_edit(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        await seed_post(await unit_env.get(DocumentStore))
        comment = await comment_service.create_comment(POST, ALICE, "Mine")

        with pytest.raises(NotAuthorizedError):
            await comment_service.update_content(POST, comment.id, BOB, "Yours")

    @pytest.mark.asyncio
    async def test_empty_edit_is_rejected(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        await seed_post(await unit_env.get(DocumentStore))
        comment = await comment_service.create_comment(POST, ALICE, "Mine")

        with pytest.raises(ValidationError):
            await comment_service.update_content(POST, comment.id, ALICE, " ")


class TestDeleteComment:
    """Tests for delete_comment."""

    @pytest.mark.asyncio
    async def test_deleting_reply_decrements_both_counters(self, unit_env):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        comment_repo = await unit_env.get(CommentRepository)
        await seed_post(await unit_env.get(DocumentStore))
        parent = await comment_service.create_comment(POST, BOB, "Great round!")
        reply = await comment_service.create_comment(
            POST, ALICE, "Thanks!", parent_id=parent.id
        )

        # Act
        await comment_service.delete_comment(POST, reply.id, ALICE)

        # Assert
        stored_parent = await comment_repo.find_by_id(POST, parent.id)
        assert stored_parent.reply_count == 0
        post = await comment_repo.find_post(POST)
        assert post.comment_count == 1

        live = await comment_service.get_comments_for_post(POST)
        assert [c.id for c in live] == [parent.id]
        everything = await comment_service.get_comments_for_post(
            POST, include_deleted=True
        )
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_deleting_twice_raises_not_found(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        await seed_post(await unit_env.get(DocumentStore))
        comment = await comment_service.create_comment(POST, ALICE, "Oops")
        await comment_service.delete_comment(POST, comment.id, ALICE)

        with pytest.raises(NotFoundError):
            await comment_service.delete_comment(POST, comment.id, ALICE)

    @pytest.mark.asyncio
    async def test_non_author_cannot_delete(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        await seed_post(await unit_env.get(DocumentStore))
        comment = await comment_service.create_comment(POST, ALICE, "Mine")

        with pytest.raises(NotAuthorizedError):
            await comment_service.delete_comment(POST, comment.id, BOB)


class TestReplyAcrossPosts:
    """Parent comments must belong to the same post."""

    @pytest.mark.asyncio
    async def test_parent_from_another_post_is_rejected(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        store = await unit_env.get(DocumentStore)
        await seed_post(store)
        await seed_post(store, post_id="post-2")
        other = await comment_service.create_comment(PostId("post-2"), ALICE, "Elsewhere")
        # Copy the foreign record under post-1 so the lookup finds it
        document = await store.get(comments_collection(PostId("post-2")), other.id)
        await store.set(comments_collection(POST), other.id, document.fields)

        with pytest.raises(BusinessRuleViolationError):
            await comment_service.create_comment(POST, BOB, "Reply", parent_id=other.id)
