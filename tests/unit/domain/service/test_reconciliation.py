"""Unit tests for pending/confirmed reconciliation."""

from clubhouse.domain.model import Comment
from clubhouse.domain.service import match_pending, reconcile
from clubhouse.domain.value import PostId, UserId, new_pending_comment_id
from tests.conftest import make_comment


def make_pending(content: str, author: str = "alice", token: str | None = None) -> Comment:
    return Comment(
        id=new_pending_comment_id(),
        post_id=PostId("post-1"),
        author_id=UserId(author),
        content=content,
        is_pending=True,
        client_token=token,
    )


class TestReconcile:
    """Tests for reconcile."""

    def test_confirmed_record_replaces_matching_placeholder(self):
        """A placeholder leaves in the same result that admits its record."""
        # Arrange
        placeholder = make_pending("Great round!")
        record = make_comment("c1", content="Great round!")

        # Act
        result = reconcile([record], [placeholder])

        # Assert
        assert result.visible == [record]
        assert result.pending == []
        assert result.matched == {placeholder.id: record}

    def test_unmatched_placeholders_follow_confirmed_in_submission_order(self):
        first = make_pending("one")
        second = make_pending("two")
        record = make_comment("c1", author="bob", content="hello")

        result = reconcile([record], [first, second])

        assert result.visible == [record, first, second]
        assert result.pending == [first, second]

    def test_same_content_from_another_author_does_not_match(self):
        placeholder = make_pending("Nice", author="alice")
        record = make_comment("c1", author="bob", content="Nice")

        result = reconcile([record], [placeholder])

        assert result.pending == [placeholder]

    def test_no_pending_is_a_plain_copy_of_confirmed(self):
        records = [make_comment("c1"), make_comment("c2")]

        result = reconcile(records, [])

        assert result.visible == records
        assert result.visible is not records


class TestMatchPending:
    """Tests for match_pending key selection."""

    def test_token_match_wins_over_content_order(self):
        """A tokened record settles only its own placeholder."""
        older = make_pending("Same", token="t-1")
        newer = make_pending("Same", token="t-2")
        record = make_comment("c1", content="Same", client_token="t-2")

        matched = match_pending([record], [older, newer])

        assert matched == {newer.id: record}

    def test_identical_submissions_need_one_record_each(self):
        """Two identical placeholders are not both settled by one record."""
        first = make_pending("Same")
        second = make_pending("Same")
        record = make_comment("c1", content="Same")

        result = reconcile([record], [first, second])

        assert result.matched == {first.id: record}
        assert result.pending == [second]

    def test_untokened_record_falls_back_to_author_and_content(self):
        placeholder = make_pending("Birdie on 7", token="t-9")
        record = make_comment("c1", content="Birdie on 7")

        assert match_pending([record], [placeholder]) == {placeholder.id: record}

    def test_record_with_unknown_token_matches_nothing(self):
        placeholder = make_pending("Birdie", token="t-1")
        record = make_comment("c1", content="Birdie", client_token="other")

        assert match_pending([record], [placeholder]) == {}
