"""
PostgreSQL repository adapters - Implement the identity and OTP ports.

This module provides the PostgreSQL implementations of the domain's
repository ports using psycopg3 with raw SQL.

Consistency:
- Signup writes the profile row and the identity row in one transaction.
  A duplicate email is detected by the UNIQUE(email) constraint via
  ON CONFLICT DO NOTHING, and the profile insert is rolled back with it.
- Every call is bounded: pool checkout by the pool timeout, each
  statement by the server-side statement_timeout set on the connection.
  Either timeout, or a dropped connection, surfaces as StoreUnavailable.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from studyauth.domain.exceptions import StoreUnavailable
from studyauth.domain.ports import IdentityRecord, NewIdentity, OTPRecord, Role

logger = logging.getLogger(__name__)

_IDENTITY_COLUMNS = (
    "id, email, first_name, last_name, password_hash, role, approved, "
    "profile_id, contact_number, image"
)


def _row_to_identity(row: tuple) -> IdentityRecord:
    return IdentityRecord(
        id=str(row[0]),
        email=row[1],
        first_name=row[2],
        last_name=row[3],
        password_hash=row[4],
        role=Role(row[5]),
        approved=row[6],
        profile_id=str(row[7]) if row[7] is not None else None,
        contact_number=row[8],
        image=row[9],
    )


class _PostgresRepository:
    def __init__(self, pool: ConnectionPool, timeout: float = 5.0) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            timeout: Max seconds to wait for a pooled connection
        """
        self._pool = pool
        self._timeout = timeout

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        # PoolTimeout and QueryCanceled are both OperationalError subclasses
        try:
            with self._pool.connection(timeout=self._timeout) as conn:
                yield conn
        except psycopg.OperationalError as exc:
            raise StoreUnavailable(type(exc).__name__) from exc


class PostgresIdentityRepository(_PostgresRepository):
    """
    Implements IdentityRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def get_by_email(self, email: str) -> IdentityRecord | None:
        sql = f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE email = %s"
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _row_to_identity(row) if row is not None else None

    def get_by_id(self, identity_id: str) -> IdentityRecord | None:
        sql = f"SELECT {_IDENTITY_COLUMNS} FROM identities WHERE id = %s::uuid"
        with self._connection() as conn, conn.cursor() as cursor:
            try:
                cursor.execute(sql, (identity_id,))
            except pg_errors.InvalidTextRepresentation:
                # Not a UUID, so no such identity
                conn.rollback()
                return None
            row = cursor.fetchone()
        return _row_to_identity(row) if row is not None else None

    def create_with_profile(self, identity: NewIdentity) -> IdentityRecord | None:
        """
        Create the empty profile and the identity in one transaction.

        Returns:
            The created record, or None if the email is already taken
            (the profile insert is rolled back)
        """
        profile_sql = """
            INSERT INTO profiles (gender, date_of_birth, about, contact_number)
            VALUES (NULL, NULL, NULL, NULL)
            RETURNING id
        """
        identity_sql = f"""
            INSERT INTO identities
                (email, first_name, last_name, password_hash, role, approved,
                 profile_id, contact_number, image)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, '')
            ON CONFLICT (email) DO NOTHING
            RETURNING {_IDENTITY_COLUMNS}
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(profile_sql)
            profile_id = cursor.fetchone()[0]
            cursor.execute(
                identity_sql,
                (
                    identity.email,
                    identity.first_name,
                    identity.last_name,
                    identity.password_hash,
                    identity.role.value,
                    identity.approved,
                    profile_id,
                    identity.contact_number,
                ),
            )
            row = cursor.fetchone()
            if row is None:
                conn.rollback()
                return None
            conn.commit()
        return _row_to_identity(row)

    def update_password(self, identity_id: str, password_hash: str) -> IdentityRecord | None:
        sql = f"""
            UPDATE identities
            SET password_hash = %s, updated_at = NOW()
            WHERE id = %s::uuid
            RETURNING {_IDENTITY_COLUMNS}
        """
        with self._connection() as conn, conn.cursor() as cursor:
            try:
                cursor.execute(sql, (password_hash, identity_id))
            except pg_errors.InvalidTextRepresentation:
                conn.rollback()
                return None
            row = cursor.fetchone()
            conn.commit()
        return _row_to_identity(row) if row is not None else None


class PostgresOTPRepository(_PostgresRepository):
    """Implements OTPRepository protocol via psycopg3."""

    def add(self, email: str, passcode: str, created_at: datetime) -> OTPRecord:
        sql = "INSERT INTO otps (email, passcode, created_at) VALUES (%s, %s, %s)"
        with self._connection() as conn:
            conn.execute(sql, (email, passcode, created_at))
            conn.commit()
        return OTPRecord(email=email, passcode=passcode, created_at=created_at)

    def latest_for_email(self, email: str) -> OTPRecord | None:
        sql = """
            SELECT email, passcode, created_at
            FROM otps
            WHERE email = %s
            ORDER BY created_at DESC, id DESC
            LIMIT 1
        """
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        if row is None:
            return None
        return OTPRecord(email=row[0], passcode=row[1], created_at=row[2])

    def passcode_in_use(self, passcode: str) -> bool:
        sql = "SELECT 1 FROM otps WHERE passcode = %s AND consumed_at IS NULL LIMIT 1"
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (passcode,))
            return cursor.fetchone() is not None

    def mark_consumed(self, email: str) -> None:
        sql = "UPDATE otps SET consumed_at = NOW() WHERE email = %s AND consumed_at IS NULL"
        with self._connection() as conn:
            conn.execute(sql, (email,))
            conn.commit()


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: studyauth/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
