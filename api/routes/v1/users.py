"""
api/routes/v1/users.py -- Account registration.

Routes:
  POST /api/v1/users  -- register; returns a session token

The plaintext password exists only inside this handler: it is hashed with
the configured bcrypt cost and discarded. Only the digest reaches the store,
and nothing here logs request bodies.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from sqlalchemy.exc import IntegrityError

from api.models import RegisterRequest, TokenResponse
from auth.avatar import gravatar_url
from auth.models import Identity
from auth.store import IdentityStore
from auth.tokens import TokenIssuer, hash_password
from core.errors import ValidationError

logger = logging.getLogger("devconnector.api")

# Auth policy:
# - POST /api/v1/users: public -- registration cannot require a token
router = APIRouter()

_DUPLICATE_MSG = "User already exists."


@router.post("/users", response_model=TokenResponse)
def register(request: Request, body: RegisterRequest) -> TokenResponse:
    """Create an identity and return a token for it.

    The pre-check gives the common case a clean error without burning a
    bcrypt round; the IntegrityError catch covers two registrations racing
    past it with the same email.
    """
    identities: IdentityStore = request.app.state.identity_store
    issuer: TokenIssuer = request.app.state.token_issuer

    if identities.get_by_email(body.email) is not None:
        raise ValidationError.single(_DUPLICATE_MSG, param="email")

    identity = Identity(
        email=body.email,
        name=body.name,
        avatar=gravatar_url(body.email),
        hashed_password=hash_password(body.password, request.app.state.settings.bcrypt_rounds),
    )
    try:
        identity_id = identities.create_identity(identity)
    except IntegrityError as exc:
        raise ValidationError.single(_DUPLICATE_MSG, param="email") from exc

    logger.info("Registered identity %s", identity_id)
    return TokenResponse(token=issuer.issue(identity_id))
