"""
social/models.py -- Domain dataclasses for profiles, posts and their entries.

These are pure data containers with zero logic. Sub-collection rules
(newest-first, duplicate prevention, guarded removal) live in
social/subcollections.py; persistence lives in social/store.py.

Every sub-collection entry carries its own `id` (uuid4 hex) so it can be
addressed independently of its position. Likes and comments also carry
`user`, the author's identity id, which is what removal authorization checks
against -- not the parent post's owner.

`version` on Profile and Post is the optimistic-concurrency token: the store
refuses a write whose version no longer matches the stored row.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Experience:
    id: str
    title: str
    company: str
    from_date: str  # ISO 8601 date
    location: Optional[str] = None
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Education:
    id: str
    school: str
    degree: str
    field_of_study: str
    from_date: str
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Social:
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


@dataclass
class Profile:
    """A developer profile, one per identity.

    skills is an ordered set: insertion order kept, no duplicates.
    experience and education are newest-first.
    """

    user_id: int
    status: str
    skills: list[str] = field(default_factory=list)
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    github_username: Optional[str] = None
    social: Social = field(default_factory=Social)
    experience: list[Experience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 0
    created_at: str = ""


@dataclass
class Like:
    id: str
    user: int


@dataclass
class Comment:
    id: str
    user: int
    text: str
    name: str = ""
    avatar: str = ""
    created_at: str = ""


@dataclass
class Post:
    """A post. name/avatar are copied from the author at creation time and
    are not kept in sync with later identity changes."""

    user_id: int
    text: str
    name: str = ""
    avatar: str = ""
    likes: list[Like] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 0
    created_at: str = ""
