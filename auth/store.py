"""
auth/store.py -- SQLAlchemy Core persistence layer for identities.

Pattern: Repository + Data Mapper (same as social/store.py).
IdentityStore is the repository; _row_to_identity is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  The identities table stores only the bcrypt digest. There is no column a
  plaintext password could land in.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import Identity

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_identities = Table(
    "identities",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("avatar", Text, nullable=False, server_default=""),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class IdentityStore:
    """Repository for Identity entities.

    Usage:
        store = IdentityStore(settings.database_url)
        identity_id = store.create_identity(Identity(email="a@b.io", name="A", hashed_password=digest))
        identity = store.get_by_email("a@b.io")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # FastAPI runs sync handlers in a thread pool; the same pooled
            # connection may be used from more than one worker thread.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def create_identity(self, identity: Identity) -> int:
        """Insert a new identity and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email is already
        registered. The route layer maps that to a validation error, which
        also covers two concurrent registrations racing past the pre-check.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _identities.insert().values(
                    email=identity.email.lower(),
                    name=identity.name,
                    hashed_password=identity.hashed_password,
                    avatar=identity.avatar,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> Identity | None:
        """Look up an identity by email (case-insensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_identities.select().where(_identities.c.email == email.lower())).fetchone()
        return _row_to_identity(row) if row is not None else None

    def get_by_id(self, identity_id: int) -> Identity | None:
        """Look up an identity by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_identities.select().where(_identities.c.id == identity_id)).fetchone()
        return _row_to_identity(row) if row is not None else None

    def get_many(self, identity_ids: set[int]) -> dict[int, Identity]:
        """Return {id: Identity} for the given ids in one query. Missing ids are absent."""
        if not identity_ids:
            return {}
        with self.engine.connect() as conn:
            rows = conn.execute(_identities.select().where(_identities.c.id.in_(identity_ids))).fetchall()
        return {r.id: _row_to_identity(r) for r in rows}

    def delete_identity(self, identity_id: int) -> bool:
        """Permanently delete an identity. Returns True if deleted, False if not found.

        Owned profile and posts live in the social store; the account
        deletion route removes those first.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_identities.delete().where(_identities.c.id == identity_id))
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_identity(row) -> Identity:
    return Identity(
        id=row.id,
        email=row.email,
        name=row.name,
        hashed_password=row.hashed_password,
        avatar=row.avatar or "",
        created_at=row.created_at,
    )
