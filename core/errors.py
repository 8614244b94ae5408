"""
core/errors.py -- Application error taxonomy.

Every failure a request can end in is one of these classes. Domain code
(auth/, social/) raises them; api/main.py has a single exception handler that
turns any AppError into its status code and a JSON body, so route handlers
never build error responses by hand.

Body shape:
  ValidationError -> {"errors": [{"msg", "param", "location"}, ...]}
  everything else -> {"msg": "<human-readable message>"}

InternalFailure never carries internal detail to the caller; the handler
substitutes a generic message and the real cause goes to the log.

Layer rule: core/ is the kernel. No imports from api/, auth/, or social/.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"msg": self.message}


class ValidationError(AppError):
    """Malformed or missing input. Carries field-level messages."""

    status_code = 400

    def __init__(self, errors: list[dict]) -> None:
        super().__init__("; ".join(e.get("msg", "") for e in errors) or "Invalid request.")
        self.errors = errors

    @classmethod
    def single(cls, msg: str, param: str = "", location: str = "body") -> ValidationError:
        return cls([{"msg": msg, "param": param, "location": location}])

    def to_body(self) -> dict:
        return {"errors": self.errors}


class Unauthorized(AppError):
    """Missing, invalid, or expired credentials."""

    status_code = 401


class Forbidden(AppError):
    """Authenticated, but not the owner of the resource or entry."""

    status_code = 403


class NotFound(AppError):
    status_code = 404


class DuplicateOperation(AppError):
    """The mutation was already applied for this caller (e.g. a second like)."""

    status_code = 400


class InvalidState(AppError):
    """The mutation's precondition does not hold (e.g. unlike without a like)."""

    status_code = 400


class Conflict(AppError):
    """The parent document changed between read and write."""

    status_code = 409


class InternalFailure(AppError):
    status_code = 500

    def __init__(self, message: str = "Server error.") -> None:
        super().__init__(message)

    def to_body(self) -> dict:
        return {"msg": "Server error."}
