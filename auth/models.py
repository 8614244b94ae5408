"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in social/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Identity:
    """A registered account.

    email is stored lower-cased and is unique across identities. avatar is
    derived from the email at registration (see auth/avatar.py) and never
    recomputed, so it is effectively immutable like the other identity fields.

    hashed_password is a bcrypt digest. The plaintext never reaches this
    object.
    """

    email: str
    name: str
    hashed_password: str
    avatar: str = ""
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class AuthContext:
    """The caller resolved from a verified session token.

    Attached to request.state.auth by the request authenticator. Frozen so
    no later stage can swap the caller identity mid-request.
    """

    identity_id: int
