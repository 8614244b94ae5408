"""
social/store.py -- SQLAlchemy-backed persistence layer for profiles and posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in social/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. SocialStore is the repository; the _row_to_*
functions are the mappers.

Documents: a profile or post is one row. Its sub-collections (experience,
education, likes, comments) and the skills/social fields are JSON serialized
into Text columns, so a mutation is always read-modify-write of one row.

Optimistic concurrency: every row has a version column. save_profile() and
save_post() write only if the stored version still equals the one that was
read, then bump it. A stale write raises Conflict instead of silently
overwriting a concurrent change (e.g. two comments added at once).

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = SocialStore(settings.database_url)
    post_id = store.create_post(Post(user_id=1, text="hi"))
    post = store.get_post(post_id)
    add_like(post.likes, 2)
    store.save_post(post)
    store.close()
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from core.errors import Conflict
from social.models import Comment, Education, Experience, Like, Post, Profile, Social

logger = logging.getLogger("devconnector.social")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_profiles = Table(
    "profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, unique=True),
    Column("status", String(255), nullable=False),
    Column("company", String(255)),
    Column("website", String(255)),
    Column("location", String(255)),
    Column("bio", Text),
    Column("github_username", String(100)),
    Column("skills", Text, nullable=False, server_default="[]"),  # JSON array
    Column("social", Text, nullable=False, server_default="{}"),  # JSON object
    Column("experience", Text, nullable=False, server_default="[]"),  # JSON array, newest first
    Column("education", Text, nullable=False, server_default="[]"),  # JSON array, newest first
    Column("version", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)

_posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("text", Text, nullable=False),
    Column("name", String(255), nullable=False, server_default=""),
    Column("avatar", Text, nullable=False, server_default=""),
    Column("likes", Text, nullable=False, server_default="[]"),  # JSON array, newest first
    Column("comments", Text, nullable=False, server_default="[]"),  # JSON array, newest first
    Column("version", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dump(entries: list) -> str:
    return json.dumps([asdict(e) for e in entries])


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _profile_columns(profile: Profile) -> dict:
    return {
        "user_id": profile.user_id,
        "status": profile.status,
        "company": profile.company,
        "website": profile.website,
        "location": profile.location,
        "bio": profile.bio,
        "github_username": profile.github_username,
        "skills": json.dumps(profile.skills),
        "social": json.dumps(asdict(profile.social)),
        "experience": _dump(profile.experience),
        "education": _dump(profile.education),
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SocialStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def create_profile(self, profile: Profile) -> int:
        """Insert a profile and return its ID.

        Raises sqlalchemy.exc.IntegrityError if the identity already has one.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _profiles.insert().values(**_profile_columns(profile), version=0, created_at=_now_iso())
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_profile_by_user(self, user_id: int) -> Optional[Profile]:
        with self.engine.connect() as conn:
            row = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).fetchone()
        return _row_to_profile(row) if row is not None else None

    def list_profiles(self) -> list[Profile]:
        """Return all profiles, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_profiles.select().order_by(_profiles.c.id)).fetchall()
        return [_row_to_profile(r) for r in rows]

    def save_profile(self, profile: Profile) -> None:
        """Write every mutable column of profile back to its row.

        Raises Conflict if the row was changed (or deleted) since profile was
        read. On success profile.version is advanced to the stored value.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _profiles.update()
                .where((_profiles.c.id == profile.id) & (_profiles.c.version == profile.version))
                .values(**_profile_columns(profile), version=profile.version + 1)
            )
            conn.commit()
        if result.rowcount == 0:
            logger.warning("Stale write rejected for profile %s at version %s", profile.id, profile.version)
            raise Conflict("Profile was modified by another request. Reload and retry.")
        profile.version += 1

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> int:
        """Insert a post with empty likes/comments and return its ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.insert().values(
                    user_id=post.user_id,
                    text=post.text,
                    name=post.name,
                    avatar=post.avatar,
                    likes=_dump(post.likes),
                    comments=_dump(post.comments),
                    version=0,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_post(self, post_id: int) -> Optional[Post]:
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def list_posts(self) -> list[Post]:
        """Return all posts, newest first.

        Ordered by id rather than created_at: ids are monotonic, timestamps
        can tie within the same clock tick.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(_posts.select().order_by(_posts.c.id.desc())).fetchall()
        return [_row_to_post(r) for r in rows]

    def save_post(self, post: Post) -> None:
        """Write likes and comments back, guarded by version. See save_profile().

        text and the denormalized author fields are immutable after creation
        and are not rewritten.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.update()
                .where((_posts.c.id == post.id) & (_posts.c.version == post.version))
                .values(
                    likes=_dump(post.likes),
                    comments=_dump(post.comments),
                    version=post.version + 1,
                )
            )
            conn.commit()
        if result.rowcount == 0:
            logger.warning("Stale write rejected for post %s at version %s", post.id, post.version)
            raise Conflict("Post was modified by another request. Reload and retry.")
        post.version += 1

    def delete_post(self, post_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def delete_user_content(self, user_id: int) -> int:
        """Delete every post authored by user_id and their profile in one transaction.

        Either both deletes commit or neither does. Returns the number of
        posts removed. Safe to repeat: a second call removes nothing.
        """
        with self.engine.connect() as conn:
            posts = conn.execute(_posts.delete().where(_posts.c.user_id == user_id))
            conn.execute(_profiles.delete().where(_profiles.c.user_id == user_id))
            conn.commit()
        return posts.rowcount

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_profile(row) -> Profile:
    return Profile(
        id=row.id,
        user_id=row.user_id,
        status=row.status,
        company=row.company,
        website=row.website,
        location=row.location,
        bio=row.bio,
        github_username=row.github_username,
        skills=json.loads(row.skills or "[]"),
        social=Social(**json.loads(row.social or "{}")),
        experience=[Experience(**e) for e in json.loads(row.experience or "[]")],
        education=[Education(**e) for e in json.loads(row.education or "[]")],
        version=row.version,
        created_at=row.created_at,
    )


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        user_id=row.user_id,
        text=row.text,
        name=row.name,
        avatar=row.avatar,
        likes=[Like(**e) for e in json.loads(row.likes or "[]")],
        comments=[Comment(**e) for e in json.loads(row.comments or "[]")],
        version=row.version,
        created_at=row.created_at,
    )
