"""Database repository for account data."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, Role
from .domain.contracts import NewAccountRecord
from .domain.errors import EmailTakenError, StoreUnavailableError


_ACCOUNT_COLUMNS = (
    "account_id, email, password_hash, first_name, last_name, "
    "mobile_number, role, created_at, updated_at"
)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id     TEXT PRIMARY KEY,
    email          TEXT NOT NULL,
    password_hash  TEXT NOT NULL,
    first_name     TEXT NOT NULL,
    last_name      TEXT NOT NULL,
    mobile_number  TEXT NOT NULL,
    role           TEXT NOT NULL DEFAULT 'USER',
    created_at     TIMESTAMPTZ NOT NULL,
    updated_at     TIMESTAMPTZ NOT NULL,
    CONSTRAINT accounts_email_key UNIQUE (email),
    CONSTRAINT accounts_role_check CHECK (role IN ('USER', 'ADMIN'))
)
"""


class AccountRepository:
    """Postgres-backed account persistence.

    Email uniqueness is enforced by the ``accounts_email_key`` constraint, so
    a concurrent duplicate insert surfaces as ``EmailTakenError`` rather than
    a second row.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the accounts table and its constraints if missing."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(_SCHEMA_SQL)
                conn.commit()
        except psycopg.Error as exc:
            raise StoreUnavailableError() from exc

    def find_by_id(self, account_id: str) -> Account | None:
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s",
            (account_id,),
        )

    def find_by_email(self, email: str) -> Account | None:
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s",
            (email,),
        )

    def find_all(self) -> list[Account]:
        """Return every account ordered by creation time."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY created_at, account_id"
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StoreUnavailableError() from exc
        return [self._map_record(row) for row in rows]

    def insert(self, record: NewAccountRecord) -> Account:
        """Persist a new account, assigning its identifier and timestamps."""
        account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO accounts ({_ACCOUNT_COLUMNS})
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (
                            account_id,
                            record.email,
                            record.password_hash,
                            record.first_name,
                            record.last_name,
                            record.mobile_number,
                            record.role.value,
                            now,
                            now,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except pg_errors.UniqueViolation as exc:
            raise EmailTakenError() from exc
        except psycopg.Error as exc:
            raise StoreUnavailableError() from exc
        return self._map_record(row)

    def update_names(self, account_id: str, first_name: str, last_name: str) -> Account | None:
        """Overwrite display names and return the updated account, if it exists."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        UPDATE accounts
                        SET first_name = %s, last_name = %s, updated_at = %s
                        WHERE account_id = %s
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (first_name, last_name, datetime.now(timezone.utc), account_id),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise StoreUnavailableError() from exc
        if not row:
            return None
        return self._map_record(row)

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreUnavailableError() from exc
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            email=row[1],
            password_hash=row[2],
            first_name=row[3],
            last_name=row[4],
            mobile_number=row[5],
            role=Role(row[6]),
            created_at=row[7],
            updated_at=row[8],
        )
