"""
API request and response models for DevConnector REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
social/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names follow the existing client contract: experience/education dates
travel as "from"/"to", education's field of study as "fieldofstudy". The
Python side uses from_date/to_date/field_of_study; aliases translate.
"""

from dataclasses import asdict
from typing import Annotated, Optional, Union

from fastapi import Path
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

from auth.models import Identity
from auth.tokens import MAX_PASSWORD_BYTES
from social.models import Comment, Education, Experience, Like, Post, Profile

# SQLite INTEGER is a signed 64-bit value; larger ids cannot be bound at all.
_MAX_ROW_ID = 2**63 - 1

# Path parameter for a stored row id. Out-of-range values fail as a 400
# validation error instead of reaching the driver.
RowId = Annotated[int, Path(ge=1, le=_MAX_ROW_ID)]

# Passwords are compared byte for byte; the models' whitespace stripping
# must not touch them.
_Password = Annotated[str, StringConstraints(strip_whitespace=False)]

# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/users."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: _Password = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """Reject passwords bcrypt would refuse (over 72 bytes once UTF-8 encoded)."""
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: _Password = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class IdentityResponse(BaseModel):
    """The current identity. Never includes the password digest."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    avatar: str
    created_at: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(
            id=identity.id,
            name=identity.name,
            email=identity.email,
            avatar=identity.avatar,
            created_at=identity.created_at or "",
        )


# ---------------------------------------------------------------------------
# Profile -- requests
# ---------------------------------------------------------------------------


class ProfileUpsert(BaseModel):
    """Request body for POST /api/v1/profile.

    skills may be sent as "python, sql, go" or ["python", "sql", "go"]; either
    way it is normalized into an ordered, de-duplicated list.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    status: str = Field(min_length=1, max_length=255)
    skills: list[str] = Field(min_length=1)
    company: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=2000)
    github_username: Optional[str] = Field(
        default=None,
        max_length=100,
        validation_alias=AliasChoices("githubusername", "github_username"),
    )
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator("skills", mode="before")
    @classmethod
    def normalize_skills(cls, value: Union[str, list]) -> list[str]:
        """Split, trim, drop empties and duplicates while preserving order.

        Runs before length validation so "  ,  " fails as an empty list
        rather than passing as two blank skills.
        """
        if not isinstance(value, (str, list)):
            # Left for the list[str] check to reject as a field error
            return value
        raw = value.split(",") if isinstance(value, str) else value
        seen: set[str] = set()
        result: list[str] = []
        for item in raw:
            skill = str(item).strip()
            if skill and skill not in seen:
                seen.add(skill)
                result.append(skill)
        return result


class ExperienceCreate(BaseModel):
    """Request body for PUT /api/v1/profile/experience."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    company: str = Field(min_length=1, max_length=255)
    from_date: str = Field(min_length=1, validation_alias=AliasChoices("from", "from_date"))
    to_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("to", "to_date"))
    location: Optional[str] = Field(default=None, max_length=255)
    current: bool = False
    description: Optional[str] = Field(default=None, max_length=2000)


class EducationCreate(BaseModel):
    """Request body for PUT /api/v1/profile/education."""

    model_config = ConfigDict(str_strip_whitespace=True)

    school: str = Field(min_length=1, max_length=255)
    degree: str = Field(min_length=1, max_length=255)
    field_of_study: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("fieldofstudy", "field_of_study"),
    )
    from_date: str = Field(min_length=1, validation_alias=AliasChoices("from", "from_date"))
    to_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("to", "to_date"))
    current: bool = False
    description: Optional[str] = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Profile -- responses
# ---------------------------------------------------------------------------


class ExperienceOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    company: str
    location: Optional[str]
    from_date: str = Field(serialization_alias="from")
    to_date: Optional[str] = Field(serialization_alias="to")
    current: bool
    description: Optional[str]

    @classmethod
    def from_entry(cls, entry: Experience) -> "ExperienceOut":
        return cls(**asdict(entry))


class EducationOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    school: str
    degree: str
    field_of_study: str = Field(serialization_alias="fieldofstudy")
    from_date: str = Field(serialization_alias="from")
    to_date: Optional[str] = Field(serialization_alias="to")
    current: bool
    description: Optional[str]

    @classmethod
    def from_entry(cls, entry: Education) -> "EducationOut":
        return cls(**asdict(entry))


class ProfileOwner(BaseModel):
    """Public slice of the owning identity, embedded in profile responses."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    avatar: str


class ProfileResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user: ProfileOwner
    status: str
    company: Optional[str]
    website: Optional[str]
    location: Optional[str]
    bio: Optional[str]
    github_username: Optional[str] = Field(serialization_alias="githubusername")
    skills: list[str]
    social: dict[str, Optional[str]]
    experience: list[ExperienceOut]
    education: list[EducationOut]
    created_at: str

    @classmethod
    def from_profile(cls, profile: Profile, owner: Optional[Identity]) -> "ProfileResponse":
        """Build the response; owner may be None if the identity vanished mid-request."""
        return cls(
            id=profile.id,
            user=ProfileOwner(
                id=profile.user_id,
                name=owner.name if owner else "",
                avatar=owner.avatar if owner else "",
            ),
            status=profile.status,
            company=profile.company,
            website=profile.website,
            location=profile.location,
            bio=profile.bio,
            github_username=profile.github_username,
            skills=profile.skills,
            social=asdict(profile.social),
            experience=[ExperienceOut.from_entry(e) for e in profile.experience],
            education=[EducationOut.from_entry(e) for e in profile.education],
            created_at=profile.created_at,
        )


# ---------------------------------------------------------------------------
# Posts -- requests
# ---------------------------------------------------------------------------


class PostCreate(BaseModel):
    """Request body for POST /api/v1/posts."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(min_length=1, max_length=5000)


class CommentCreate(BaseModel):
    """Request body for POST /api/v1/posts/comment/{post_id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(min_length=1, max_length=2000)


# ---------------------------------------------------------------------------
# Posts -- responses
# ---------------------------------------------------------------------------


class LikeOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user: int

    @classmethod
    def from_entry(cls, entry: Like) -> "LikeOut":
        return cls(id=entry.id, user=entry.user)


class CommentOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user: int
    text: str
    name: str
    avatar: str
    created_at: str

    @classmethod
    def from_entry(cls, entry: Comment) -> "CommentOut":
        return cls(**asdict(entry))


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user: int
    text: str
    name: str
    avatar: str
    likes: list[LikeOut]
    comments: list[CommentOut]
    created_at: str

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            user=post.user_id,
            text=post.text,
            name=post.name,
            avatar=post.avatar,
            likes=[LikeOut.from_entry(like) for like in post.likes],
            comments=[CommentOut.from_entry(c) for c in post.comments],
            created_at=post.created_at,
        )


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    """Plain {"msg": ...} body, used for confirmations and all non-validation errors."""

    model_config = ConfigDict(frozen=True)

    msg: str


class FieldError(BaseModel):
    model_config = ConfigDict(frozen=True)

    msg: str
    param: str = ""
    location: str = "body"


class ValidationErrorResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    errors: list[FieldError]


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
