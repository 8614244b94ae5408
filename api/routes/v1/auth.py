"""
api/routes/v1/auth.py -- Login and current-identity endpoints.

Routes:
  POST /api/v1/auth  -- email/password login; returns a session token
  GET  /api/v1/auth  -- current identity (requires token)

Security:
  authenticate_identity() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Wrong email and wrong password produce the same 401 body.
  Cache-Control: no-store on login responses so proxies never keep a token.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.models import IdentityResponse, LoginRequest, TokenResponse
from auth.dependencies import get_identity_id
from auth.store import IdentityStore
from auth.tokens import TokenIssuer, authenticate_identity
from core.errors import NotFound, Unauthorized

logger = logging.getLogger("devconnector.api")

# Auth policy:
# - POST /api/v1/auth: public -- the login endpoint must be unauthenticated
# - GET  /api/v1/auth: requires token (get_identity_id)
router = APIRouter()


@router.post("/auth", response_model=TokenResponse)
def login(request: Request, response: Response, body: LoginRequest) -> TokenResponse:
    """Exchange valid credentials for a session token."""
    identities: IdentityStore = request.app.state.identity_store
    issuer: TokenIssuer = request.app.state.token_issuer
    rounds = request.app.state.settings.bcrypt_rounds

    identity = authenticate_identity(identities, body.email, body.password, rounds)
    if identity is None:
        raise Unauthorized("Invalid credentials.")

    response.headers["Cache-Control"] = "no-store"
    logger.info("Identity %s logged in", identity.id)
    return TokenResponse(token=issuer.issue(identity.id))


@router.get("/auth", response_model=IdentityResponse)
def current_identity(request: Request, identity_id: int = Depends(get_identity_id)) -> IdentityResponse:
    """Return the caller's identity record.

    The token can outlive the account (tokens are not revocable), so a valid
    token for a deleted identity yields 404 rather than 401.
    """
    identities: IdentityStore = request.app.state.identity_store
    identity = identities.get_by_id(identity_id)
    if identity is None:
        raise NotFound("User not found.")
    return IdentityResponse.from_identity(identity)
