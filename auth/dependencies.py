"""
auth/dependencies.py -- FastAPI Depends() helpers for request authentication.

The session token arrives in a single designated header (x-auth-token unless
configured otherwise). Verification is self-contained: the signature and
expiry are checked against the TokenIssuer on app.state and the identity id
is taken from the claim. No database lookup happens here, so a deleted
account's token keeps authenticating until it expires; handlers that need the
identity record look it up themselves and 404 if it is gone.

authenticate_request() raises Unauthorized on any failure.
get_identity_id() is the convenience dependency most handlers use.

Layer rule: no imports from api/ or social/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from auth.models import AuthContext
from auth.tokens import TokenError, TokenIssuer
from core.errors import Unauthorized

logger = logging.getLogger("devconnector.auth")

_MISSING_TOKEN_MSG = "No token, authorization denied."
# Same message for bad signature, bad payload and expiry.
_INVALID_TOKEN_MSG = "Token is not valid."


def authenticate_request(request: Request) -> AuthContext:
    """Resolve the caller from the request's token header.

    On success the AuthContext is stored on request.state.auth and returned.
    Raises Unauthorized if the header is missing or the token fails
    verification.

    Use as a FastAPI dependency:
        @router.put("/posts/like/{post_id}")
        def like(post_id: int, auth: AuthContext = Depends(authenticate_request)): ...
    """
    header_name: str = request.app.state.settings.auth_header
    token = request.headers.get(header_name, "").strip()
    if not token:
        raise Unauthorized(_MISSING_TOKEN_MSG)

    issuer: TokenIssuer = request.app.state.token_issuer
    try:
        identity_id = issuer.verify(token)
    except TokenError as exc:
        logger.info("Rejected token on %s %s: %s", request.method, request.url.path, type(exc).__name__)
        raise Unauthorized(_INVALID_TOKEN_MSG) from exc

    context = AuthContext(identity_id=identity_id)
    request.state.auth = context
    return context


def get_identity_id(auth: AuthContext = Depends(authenticate_request)) -> int:
    """Return the authenticated caller's identity id."""
    return auth.identity_id
