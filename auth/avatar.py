"""
auth/avatar.py -- Gravatar URL derivation for new identities.

Gravatar keys avatars by the MD5 of the trimmed, lower-cased email. MD5 is
the provider's lookup key here, not a security primitive.
"""

from __future__ import annotations

import hashlib
from urllib.parse import urlencode

_GRAVATAR_BASE = "//www.gravatar.com/avatar/"


def gravatar_url(email: str, size: int = 200, rating: str = "pg", default: str = "retro") -> str:
    """Return a protocol-relative Gravatar URL for the given email.

    Unregistered emails fall back to the generated `default` image, so every
    identity gets a usable avatar without an outbound request.
    """
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()  # noqa: S324 # nosec B324
    query = urlencode({"s": str(size), "r": rating, "d": default})
    return f"{_GRAVATAR_BASE}{digest}?{query}"
