"""
social/subcollections.py -- Add/remove rules for ordered sub-collections.

All four embedded lists (post likes, post comments, profile experience,
profile education) follow the same rules:

  Add:    the new entry gets a fresh id and is prepended -- the list is
          always newest-first, with no secondary sort key.
  Remove: the entry is found by id with a linear scan and spliced out;
          the remaining entries keep their relative order.

Per entry the lifecycle is absent -> present -> absent. Removing an absent
entry always raises (NotFound, or InvalidState for unlike); it is never a
silent no-op.

Likes add two rules on top: one like per identity (DuplicateOperation on a
second add), and unlike removes the caller's own like rather than addressing
an entry by id.

These functions mutate the list in place and never touch storage. The
caller loads the parent, applies one of these, and persists the parent.
"""

from __future__ import annotations

import uuid
from typing import TypeVar

from core.errors import DuplicateOperation, InvalidState, NotFound
from social.guard import require_owner
from social.models import Comment, Like

_Entry = TypeVar("_Entry")


def new_entry_id() -> str:
    return uuid.uuid4().hex


def prepend(entries: list[_Entry], entry: _Entry) -> _Entry:
    """Insert entry at the head of the list (newest-first) and return it."""
    entries.insert(0, entry)
    return entry


def find_index(entries: list, entry_id: str) -> int | None:
    """Return the position of the entry with this id, or None."""
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return None


def remove_by_id(entries: list[_Entry], entry_id: str, not_found: str = "Entry not found.") -> _Entry:
    """Splice out the entry with this id and return it. Raises NotFound if absent."""
    index = find_index(entries, entry_id)
    if index is None:
        raise NotFound(not_found)
    return entries.pop(index)


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


def _like_index(likes: list[Like], user_id: int) -> int | None:
    for index, like in enumerate(likes):
        if like.user == user_id:
            return index
    return None


def add_like(likes: list[Like], user_id: int) -> Like:
    """Prepend a like by user_id. Raises DuplicateOperation if one already exists."""
    if _like_index(likes, user_id) is not None:
        raise DuplicateOperation("Post already liked.")
    return prepend(likes, Like(id=new_entry_id(), user=user_id))


def remove_like(likes: list[Like], user_id: int) -> Like:
    """Remove user_id's like. Raises InvalidState if user_id has not liked."""
    index = _like_index(likes, user_id)
    if index is None:
        raise InvalidState("Post has not yet been liked.")
    return likes.pop(index)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


def remove_comment(comments: list[Comment], comment_id: str, caller_id: int) -> Comment:
    """Remove a comment on behalf of caller_id.

    Existence is checked before ownership: an unknown id is NotFound for
    everyone, a known id owned by someone else is Forbidden. The list is
    untouched unless both checks pass.
    """
    index = find_index(comments, comment_id)
    if index is None:
        raise NotFound("Comment does not exist.")
    require_owner(caller_id, comments[index].user, "User not authorized to remove this comment.")
    return comments.pop(index)
