"""
api/routes/v1/profile.py -- Developer profile routes.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /profile/me                    -- caller's profile
  POST   /profile                       -- create or update caller's profile
  GET    /profile                       -- all profiles (public)
  GET    /profile/user/{user_id}        -- one identity's profile (public)
  DELETE /profile                       -- delete caller's posts, profile, account
  PUT    /profile/experience            -- add experience entry
  DELETE /profile/experience/{exp_id}   -- remove experience entry
  PUT    /profile/education             -- add education entry
  DELETE /profile/education/{edu_id}    -- remove education entry

Experience and education are always mutated on the caller's own profile,
so ownership follows from the token. Every sub-collection route returns the
updated collection, newest first.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError

from api.models import (
    EducationCreate,
    EducationOut,
    ExperienceCreate,
    ExperienceOut,
    MessageResponse,
    ProfileResponse,
    ProfileUpsert,
    RowId,
)
from auth.dependencies import get_identity_id
from auth.store import IdentityStore
from core.errors import Conflict, NotFound
from social import mutations
from social.models import Profile, Social
from social.store import SocialStore

logger = logging.getLogger("devconnector.api")

# Auth policy:
# - GET /profile and GET /profile/user/{id}: public -- profiles are a directory
# - everything else: requires token (get_identity_id)
router = APIRouter()

_SOCIAL_FIELDS = ("youtube", "twitter", "facebook", "linkedin", "instagram")


def _respond(request: Request, profile: Profile) -> ProfileResponse:
    identities: IdentityStore = request.app.state.identity_store
    return ProfileResponse.from_profile(profile, identities.get_by_id(profile.user_id))


# ---------------------------------------------------------------------------
# Whole-profile routes
# ---------------------------------------------------------------------------


@router.get("/profile/me", response_model=ProfileResponse)
def my_profile(request: Request, identity_id: int = Depends(get_identity_id)) -> ProfileResponse:
    social: SocialStore = request.app.state.social_store
    profile = social.get_profile_by_user(identity_id)
    if profile is None:
        raise NotFound("There is no profile for this user.")
    return _respond(request, profile)


@router.post("/profile", response_model=ProfileResponse)
def upsert_profile(
    request: Request,
    body: ProfileUpsert,
    identity_id: int = Depends(get_identity_id),
) -> ProfileResponse:
    """Create the caller's profile, or update the fields sent if one exists.

    Experience and education are never touched here; they change only
    through their own routes.
    """
    social: SocialStore = request.app.state.social_store

    profile = social.get_profile_by_user(identity_id)
    if profile is None:
        links = Social(**{name: getattr(body, name) for name in _SOCIAL_FIELDS})
        profile = Profile(
            user_id=identity_id,
            status=body.status,
            skills=body.skills,
            company=body.company,
            website=body.website,
            location=body.location,
            bio=body.bio,
            github_username=body.github_username,
            social=links,
        )
        try:
            social.create_profile(profile)
        except IntegrityError as exc:
            raise Conflict("Profile was created by another request. Reload and retry.") from exc
        logger.info("Profile created for identity %s", identity_id)
    else:
        # Only fields present in the request change; omitted ones keep their value.
        for name in body.model_fields_set:
            target = profile.social if name in _SOCIAL_FIELDS else profile
            setattr(target, name, getattr(body, name))
        social.save_profile(profile)
        logger.info("Profile %s updated", profile.id)

    return _respond(request, social.get_profile_by_user(identity_id))


@router.get("/profile", response_model=list[ProfileResponse])
def list_profiles(request: Request) -> list[ProfileResponse]:
    social: SocialStore = request.app.state.social_store
    identities: IdentityStore = request.app.state.identity_store
    profiles = social.list_profiles()
    # One identity query for the whole page rather than one per profile
    owners = identities.get_many({p.user_id for p in profiles})
    return [ProfileResponse.from_profile(p, owners.get(p.user_id)) for p in profiles]


@router.get("/profile/user/{user_id}", response_model=ProfileResponse)
def profile_by_user(request: Request, user_id: RowId) -> ProfileResponse:
    social: SocialStore = request.app.state.social_store
    profile = social.get_profile_by_user(user_id)
    if profile is None:
        raise NotFound("Profile not found.")
    return _respond(request, profile)


@router.delete("/profile", response_model=MessageResponse)
def delete_account(request: Request, identity_id: int = Depends(get_identity_id)) -> MessageResponse:
    """Delete the caller's posts and profile together, then the identity.

    The identity goes last so a failure part way leaves an account that can
    still authenticate and repeat the request; the repeat finds no content
    and removes the identity.

    Likes and comments the caller left on other people's posts stay in
    place; they keep the identity id and denormalized name they were made with.
    """
    social: SocialStore = request.app.state.social_store
    identities: IdentityStore = request.app.state.identity_store

    removed_posts = social.delete_user_content(identity_id)
    identities.delete_identity(identity_id)
    logger.info("Identity %s deleted with %d posts", identity_id, removed_posts)
    return MessageResponse(msg="User removed.")


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------


@router.put("/profile/experience", response_model=list[ExperienceOut])
def add_experience(
    request: Request,
    body: ExperienceCreate,
    identity_id: int = Depends(get_identity_id),
) -> list[ExperienceOut]:
    social: SocialStore = request.app.state.social_store
    entries = mutations.add_experience(social, identity_id, **body.model_dump())
    return [ExperienceOut.from_entry(e) for e in entries]


@router.delete("/profile/experience/{exp_id}", response_model=list[ExperienceOut])
def remove_experience(
    request: Request,
    exp_id: str,
    identity_id: int = Depends(get_identity_id),
) -> list[ExperienceOut]:
    social: SocialStore = request.app.state.social_store
    entries = mutations.remove_experience(social, identity_id, exp_id)
    return [ExperienceOut.from_entry(e) for e in entries]


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------


@router.put("/profile/education", response_model=list[EducationOut])
def add_education(
    request: Request,
    body: EducationCreate,
    identity_id: int = Depends(get_identity_id),
) -> list[EducationOut]:
    social: SocialStore = request.app.state.social_store
    entries = mutations.add_education(social, identity_id, **body.model_dump())
    return [EducationOut.from_entry(e) for e in entries]


@router.delete("/profile/education/{edu_id}", response_model=list[EducationOut])
def remove_education(
    request: Request,
    edu_id: str,
    identity_id: int = Depends(get_identity_id),
) -> list[EducationOut]:
    social: SocialStore = request.app.state.social_store
    entries = mutations.remove_education(social, identity_id, edu_id)
    return [EducationOut.from_entry(e) for e in entries]
