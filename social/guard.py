"""
social/guard.py -- Ownership checks for mutations.

A mutation is allowed only when the caller is the declared owner of the
thing being changed. For posts that is the post's author; for a comment it is
the comment's own author, so a post owner cannot remove other people's
comments on their post. Adding likes and comments needs no ownership at all.
"""

from __future__ import annotations

from core.errors import Forbidden


def authorize(caller_id: int, owner_id: int) -> bool:
    return caller_id == owner_id


def require_owner(caller_id: int, owner_id: int, message: str = "User not authorized.") -> None:
    """Raise Forbidden unless caller_id owns the resource."""
    if not authorize(caller_id, owner_id):
        raise Forbidden(message)
