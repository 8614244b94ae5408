"""
social/mutations.py -- Guarded sub-collection mutations on stored documents.

Each function is one mutation endpoint's worth of work:
  load parent (NotFound) -> ownership check -> subcollections rule -> save
and returns the updated sub-collection. Nothing is persisted unless every
check passes, so a failed mutation leaves the stored document untouched.

Profile sub-collections are always reached through the caller's own profile
(looked up by identity id), so there is no foreign profile to guard against.
Post sub-collections are reachable by anyone authenticated; removal is guarded
per entry in social/subcollections.py.

Route handlers call these with the identity id from the request
authenticator. Denormalized author fields (name, avatar) are resolved by the
caller because social/ does not import auth/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from core.errors import NotFound
from social import subcollections
from social.guard import require_owner
from social.models import Comment, Education, Experience, Like, Post, Profile
from social.store import SocialStore

logger = logging.getLogger("devconnector.social")


def _load_profile(store: SocialStore, user_id: int) -> Profile:
    profile = store.get_profile_by_user(user_id)
    if profile is None:
        raise NotFound("There is no profile for this user.")
    return profile


def _load_post(store: SocialStore, post_id: int) -> Post:
    post = store.get_post(post_id)
    if post is None:
        raise NotFound("Post not found.")
    return post


# ---------------------------------------------------------------------------
# Profile: experience / education
# ---------------------------------------------------------------------------


def add_experience(store: SocialStore, user_id: int, **fields) -> list[Experience]:
    profile = _load_profile(store, user_id)
    entry = subcollections.prepend(
        profile.experience, Experience(id=subcollections.new_entry_id(), **fields)
    )
    store.save_profile(profile)
    logger.info("Experience %s added to profile %s", entry.id, profile.id)
    return profile.experience


def remove_experience(store: SocialStore, user_id: int, exp_id: str) -> list[Experience]:
    profile = _load_profile(store, user_id)
    subcollections.remove_by_id(profile.experience, exp_id, "Experience not found.")
    store.save_profile(profile)
    logger.info("Experience %s removed from profile %s", exp_id, profile.id)
    return profile.experience


def add_education(store: SocialStore, user_id: int, **fields) -> list[Education]:
    profile = _load_profile(store, user_id)
    entry = subcollections.prepend(
        profile.education, Education(id=subcollections.new_entry_id(), **fields)
    )
    store.save_profile(profile)
    logger.info("Education %s added to profile %s", entry.id, profile.id)
    return profile.education


def remove_education(store: SocialStore, user_id: int, edu_id: str) -> list[Education]:
    profile = _load_profile(store, user_id)
    subcollections.remove_by_id(profile.education, edu_id, "Education not found.")
    store.save_profile(profile)
    logger.info("Education %s removed from profile %s", edu_id, profile.id)
    return profile.education


# ---------------------------------------------------------------------------
# Posts: likes / comments
# ---------------------------------------------------------------------------


def like_post(store: SocialStore, post_id: int, caller_id: int) -> list[Like]:
    post = _load_post(store, post_id)
    subcollections.add_like(post.likes, caller_id)
    store.save_post(post)
    logger.info("Post %s liked by %s", post_id, caller_id)
    return post.likes


def unlike_post(store: SocialStore, post_id: int, caller_id: int) -> list[Like]:
    post = _load_post(store, post_id)
    subcollections.remove_like(post.likes, caller_id)
    store.save_post(post)
    logger.info("Post %s unliked by %s", post_id, caller_id)
    return post.likes


def add_comment(
    store: SocialStore,
    post_id: int,
    caller_id: int,
    text: str,
    name: str = "",
    avatar: str = "",
) -> list[Comment]:
    post = _load_post(store, post_id)
    comment = subcollections.prepend(
        post.comments,
        Comment(
            id=subcollections.new_entry_id(),
            user=caller_id,
            text=text,
            name=name,
            avatar=avatar,
            created_at=datetime.now(timezone.utc).isoformat(),
        ),
    )
    store.save_post(post)
    logger.info("Comment %s added to post %s by %s", comment.id, post_id, caller_id)
    return post.comments


def remove_comment(store: SocialStore, post_id: int, comment_id: str, caller_id: int) -> list[Comment]:
    post = _load_post(store, post_id)
    subcollections.remove_comment(post.comments, comment_id, caller_id)
    store.save_post(post)
    logger.info("Comment %s removed from post %s by %s", comment_id, post_id, caller_id)
    return post.comments


# ---------------------------------------------------------------------------
# Posts: whole-document deletion
# ---------------------------------------------------------------------------


def delete_post(store: SocialStore, post_id: int, caller_id: int) -> None:
    post = _load_post(store, post_id)
    require_owner(caller_id, post.user_id, "User not authorized to remove this post.")
    store.delete_post(post_id)
    logger.info("Post %s deleted by %s", post_id, caller_id)
