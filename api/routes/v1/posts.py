"""
api/routes/v1/posts.py -- Post, like and comment routes.

Routes:
  POST   /posts                              -- create post
  GET    /posts                              -- all posts, newest first
  GET    /posts/{post_id}                    -- one post
  DELETE /posts/{post_id}                    -- delete own post
  PUT    /posts/like/{post_id}               -- like (once per identity)
  PUT    /posts/unlike/{post_id}             -- remove own like
  POST   /posts/comment/{post_id}            -- add comment
  DELETE /posts/comment/{post_id}/{comment_id} -- remove own comment

Authorization:
  Any authenticated identity may like or comment on any post. Removing a
  comment requires being that comment's author; owning the post is not
  enough. Deleting a post requires owning it. Both failures are 403.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from api.models import CommentCreate, CommentOut, LikeOut, MessageResponse, PostCreate, PostResponse, RowId
from auth.dependencies import authenticate_request, get_identity_id
from auth.models import Identity
from auth.store import IdentityStore
from core.errors import NotFound
from social import mutations
from social.models import Post
from social.store import SocialStore

logger = logging.getLogger("devconnector.api")

# All post routes require a token.
# Router-level dependency applies to every route registered on this router;
# FastAPI caches it per request, so handlers that also ask for
# get_identity_id do not verify the token twice.
router = APIRouter(dependencies=[Depends(authenticate_request)])


def _author(request: Request, identity_id: int) -> Identity:
    """Return the caller's identity for denormalizing name/avatar onto new content."""
    identities: IdentityStore = request.app.state.identity_store
    identity = identities.get_by_id(identity_id)
    if identity is None:
        raise NotFound("User not found.")
    return identity


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostCreate,
    identity_id: int = Depends(get_identity_id),
) -> PostResponse:
    social: SocialStore = request.app.state.social_store
    author = _author(request, identity_id)
    post_id = social.create_post(Post(user_id=identity_id, text=body.text, name=author.name, avatar=author.avatar))
    logger.info("Post %s created by %s", post_id, identity_id)
    return PostResponse.from_post(social.get_post(post_id))


@router.get("/posts", response_model=list[PostResponse])
def list_posts(request: Request) -> list[PostResponse]:
    social: SocialStore = request.app.state.social_store
    return [PostResponse.from_post(p) for p in social.list_posts()]


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(request: Request, post_id: RowId) -> PostResponse:
    social: SocialStore = request.app.state.social_store
    post = social.get_post(post_id)
    if post is None:
        raise NotFound("Post not found.")
    return PostResponse.from_post(post)


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(request: Request, post_id: RowId, identity_id: int = Depends(get_identity_id)) -> MessageResponse:
    social: SocialStore = request.app.state.social_store
    mutations.delete_post(social, post_id, identity_id)
    return MessageResponse(msg="Post removed.")


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


@router.put("/posts/like/{post_id}", response_model=list[LikeOut])
def like_post(request: Request, post_id: RowId, identity_id: int = Depends(get_identity_id)) -> list[LikeOut]:
    social: SocialStore = request.app.state.social_store
    likes = mutations.like_post(social, post_id, identity_id)
    return [LikeOut.from_entry(like) for like in likes]


@router.put("/posts/unlike/{post_id}", response_model=list[LikeOut])
def unlike_post(request: Request, post_id: RowId, identity_id: int = Depends(get_identity_id)) -> list[LikeOut]:
    social: SocialStore = request.app.state.social_store
    likes = mutations.unlike_post(social, post_id, identity_id)
    return [LikeOut.from_entry(like) for like in likes]


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@router.post("/posts/comment/{post_id}", response_model=list[CommentOut])
def add_comment(
    request: Request,
    post_id: RowId,
    body: CommentCreate,
    identity_id: int = Depends(get_identity_id),
) -> list[CommentOut]:
    social: SocialStore = request.app.state.social_store
    author = _author(request, identity_id)
    comments = mutations.add_comment(
        social, post_id, identity_id, body.text, name=author.name, avatar=author.avatar
    )
    return [CommentOut.from_entry(c) for c in comments]


@router.delete("/posts/comment/{post_id}/{comment_id}", response_model=list[CommentOut])
def remove_comment(
    request: Request,
    post_id: RowId,
    comment_id: str,
    identity_id: int = Depends(get_identity_id),
) -> list[CommentOut]:
    social: SocialStore = request.app.state.social_store
    comments = mutations.remove_comment(social, post_id, comment_id, identity_id)
    return [CommentOut.from_entry(c) for c in comments]
