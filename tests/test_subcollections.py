"""Unit tests for social/subcollections.py and social/guard.py.

Covers:
- prepend is newest-first; ids are unique
- remove_by_id splices exactly one entry and keeps order; NotFound when absent
- likes: one per identity (DuplicateOperation), unlike removes only the
  caller's like, unlike without a like is InvalidState
- comments: author-only removal (Forbidden), NotFound for unknown ids,
  list untouched on failure
- authorize / require_owner
"""

import pytest

from core.errors import DuplicateOperation, Forbidden, InvalidState, NotFound
from social.guard import authorize, require_owner
from social.models import Comment, Experience, Like
from social.subcollections import (
    add_like,
    find_index,
    new_entry_id,
    prepend,
    remove_by_id,
    remove_comment,
    remove_like,
)


def _exp(title: str) -> Experience:
    return Experience(id=new_entry_id(), title=title, company="Acme", from_date="2020-01-01")


def _comment(user: int, text: str = "hi") -> Comment:
    return Comment(id=new_entry_id(), user=user, text=text)


class TestOwnershipGuard:
    def test_authorize(self) -> None:
        assert authorize(1, 1) is True
        assert authorize(1, 2) is False

    def test_require_owner_passes_for_owner(self) -> None:
        require_owner(5, 5)

    def test_require_owner_raises_for_other(self) -> None:
        with pytest.raises(Forbidden) as excinfo:
            require_owner(5, 6, "nope")
        assert excinfo.value.message == "nope"
        assert excinfo.value.status_code == 403


class TestPrependAndRemove:
    def test_new_entry_ids_are_unique(self) -> None:
        assert len({new_entry_id() for _ in range(200)}) == 200

    def test_prepend_is_newest_first(self) -> None:
        entries: list[Experience] = []
        first = prepend(entries, _exp("first"))
        second = prepend(entries, _exp("second"))
        third = prepend(entries, _exp("third"))
        assert entries == [third, second, first]

    def test_remove_middle_keeps_order(self) -> None:
        entries: list[Experience] = []
        a, b, c, d = (prepend(entries, _exp(t)) for t in "abcd")
        removed = remove_by_id(entries, b.id)
        assert removed is b
        assert entries == [d, c, a]

    def test_remove_head_and_tail(self) -> None:
        entries: list[Experience] = []
        a, b, c = (prepend(entries, _exp(t)) for t in "abc")
        remove_by_id(entries, c.id)
        remove_by_id(entries, a.id)
        assert entries == [b]

    def test_remove_unknown_raises_and_leaves_list(self) -> None:
        entries = [_exp("only")]
        snapshot = list(entries)
        with pytest.raises(NotFound):
            remove_by_id(entries, "does-not-exist", "Experience not found.")
        assert entries == snapshot

    def test_remove_twice_raises(self) -> None:
        entries: list[Experience] = []
        entry = prepend(entries, _exp("x"))
        remove_by_id(entries, entry.id)
        with pytest.raises(NotFound):
            remove_by_id(entries, entry.id)

    def test_find_index(self) -> None:
        entries: list[Experience] = []
        a = prepend(entries, _exp("a"))
        b = prepend(entries, _exp("b"))
        assert find_index(entries, b.id) == 0
        assert find_index(entries, a.id) == 1
        assert find_index(entries, "missing") is None


class TestLikes:
    def test_first_like_succeeds(self) -> None:
        likes: list[Like] = []
        like = add_like(likes, 1)
        assert likes == [like]
        assert like.user == 1

    def test_duplicate_like_rejected_and_unchanged(self) -> None:
        likes: list[Like] = []
        add_like(likes, 1)
        snapshot = list(likes)
        with pytest.raises(DuplicateOperation):
            add_like(likes, 1)
        assert likes == snapshot

    def test_likes_newest_first(self) -> None:
        likes: list[Like] = []
        add_like(likes, 1)
        add_like(likes, 2)
        add_like(likes, 3)
        assert [like.user for like in likes] == [3, 2, 1]

    def test_unlike_without_like(self) -> None:
        likes: list[Like] = []
        add_like(likes, 2)
        with pytest.raises(InvalidState):
            remove_like(likes, 1)
        assert [like.user for like in likes] == [2]

    def test_unlike_removes_only_callers_like(self) -> None:
        likes: list[Like] = []
        for user in (1, 2, 3):
            add_like(likes, user)
        removed = remove_like(likes, 2)
        assert removed.user == 2
        assert [like.user for like in likes] == [3, 1]

    def test_like_again_after_unlike(self) -> None:
        likes: list[Like] = []
        add_like(likes, 1)
        remove_like(likes, 1)
        add_like(likes, 1)
        assert [like.user for like in likes] == [1]


class TestComments:
    def test_author_can_remove(self) -> None:
        comments = [_comment(1), _comment(2)]
        target = comments[1]
        assert remove_comment(comments, target.id, 2) is target
        assert [c.user for c in comments] == [1]

    def test_non_author_forbidden_and_unchanged(self) -> None:
        comments = [_comment(1)]
        snapshot = list(comments)
        with pytest.raises(Forbidden):
            remove_comment(comments, comments[0].id, 99)
        assert comments == snapshot

    def test_unknown_comment_is_not_found_for_anyone(self) -> None:
        comments = [_comment(1)]
        with pytest.raises(NotFound):
            remove_comment(comments, "missing", 1)
        with pytest.raises(NotFound):
            remove_comment(comments, "missing", 2)
