"""
auth/tokens.py -- Password hashing and session token utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the claim {"user": {"id": ...}}
       plus iat/exp. TokenIssuer is constructed from an explicit Settings
       object; the signing key is never read from module-level state.
       verify() distinguishes InvalidToken from ExpiredToken for callers that
       care (tests, logs). The request authenticator collapses both into one
       401 so clients cannot tell which check failed.

  Passwords: bcrypt directly. The cost factor comes from configuration and is
       embedded in every digest, alongside the per-password random salt, so
       existing digests keep verifying after the configured cost changes.
       _dummy_hash() enables timing equalization in authenticate_identity()
       so response time does not reveal whether an email is registered.

Layer rule: no imports from api/ or social/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from core.config import Settings

if TYPE_CHECKING:
    from auth.models import Identity
    from auth.store import IdentityStore

logger = logging.getLogger("devconnector.auth")

_ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes; bcrypt>=5 rejects longer input.
MAX_PASSWORD_BYTES = 72


class TokenError(Exception):
    """Base class for session token verification failures."""


class InvalidToken(TokenError):
    """Signature mismatch, undecodable payload, or unexpected claim shape."""


class ExpiredToken(TokenError):
    """Signature is valid but the exp claim has passed."""


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 10) -> str:
    """Return a bcrypt digest of the plaintext with a fresh random salt.

    Passwords longer than 72 bytes are rejected by bcrypt. The API layer caps
    password length at MAX_PASSWORD_BYTES before this is reached.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext matches the digest.

    Fails closed: a malformed digest, or input bcrypt refuses, is a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    # One digest per cost factor, computed on first use. Verifying against a
    # digest of the same cost keeps the unknown-email path as slow as the
    # wrong-password path.
    return hash_password("devconnector_timing_dummy", rounds)


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Mints and verifies signed session tokens.

    Usage:
        issuer = TokenIssuer(settings)
        token = issuer.issue(identity.id)
        identity_id = issuer.verify(token)   # raises InvalidToken / ExpiredToken
    """

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.secret_key
        self._ttl = timedelta(days=settings.token_expire_days)

    def issue(self, identity_id: int, now: datetime | None = None) -> str:
        """Encode a signed token for identity_id expiring ttl after `now`.

        `now` defaults to the current UTC time; tests pass an earlier instant
        to mint tokens that are already expired.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user": {"id": identity_id},
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> int:
        """Return the identity id embedded in a valid, unexpired token."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise ExpiredToken("Token has expired.") from exc
        except JWTError as exc:
            raise InvalidToken("Token signature or payload is invalid.") from exc

        user = payload.get("user")
        identity_id = user.get("id") if isinstance(user, dict) else None
        # bool is an int subclass; a claim of {"id": true} is not an identity.
        if not isinstance(identity_id, int) or isinstance(identity_id, bool):
            raise InvalidToken("Token does not carry a user id.")
        return identity_id


# ---------------------------------------------------------------------------
# Login (constant-time)
# ---------------------------------------------------------------------------


def authenticate_identity(store: IdentityStore, email: str, password: str, rounds: int = 10) -> Identity | None:
    """Check an email/password pair with timing equalization.

    Always runs bcrypt whether or not the email exists:
    - Unknown email: bcrypt runs against _dummy_hash(rounds)
    - Wrong password: bcrypt runs against the real digest

    Returns the Identity on success, None on any failure.
    """
    identity = store.get_by_email(email)
    if identity is None:
        verify_password(password, _dummy_hash(rounds))
        return None
    if not verify_password(password, identity.hashed_password):
        return None
    return identity
