"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Storage-level invariants (see migrations/001_create_accounts.sql):
- UNIQUE(email): duplicate creates are resolved atomically with
  INSERT ... ON CONFLICT DO NOTHING and reported as DUPLICATE_EMAIL.
- OTP pairing: CHECK constraint keeps code and expiry both set or both NULL.
- Forward-only verification: save() writes is_verified as
  ``is_verified OR new_value`` and never repopulates the OTP of a
  verified row.
"""

import logging
import uuid
from pathlib import Path

from psycopg_pool import ConnectionPool

from src.domain.account import Account, NewAccount, Role
from src.domain.ports import CreateOutcome, CreateResult

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, name, email, password_hash, role, is_verified,
    email_verification_otp, email_verification_expires, created_at
"""


def _row_to_account(row: tuple) -> Account:
    return Account(
        id=str(row[0]),
        name=row[1],
        email=row[2],
        password_hash=row[3],
        role=Role(row[4]),
        is_verified=row[5],
        email_verification_otp=row[6],
        email_verification_expires=row[7],
        created_at=row[8],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> Account | None:
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        return _row_to_account(row) if row is not None else None

    def find_by_id(self, account_id: str) -> Account | None:
        # Ids are UUIDs; anything else cannot match and would fail the cast
        try:
            key = uuid.UUID(account_id)
        except (TypeError, ValueError):
            return None

        sql = f"SELECT {_COLUMNS} FROM accounts WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (key,))
            row = cursor.fetchone()

        return _row_to_account(row) if row is not None else None

    def create(self, new_account: NewAccount) -> CreateResult:
        """
        Insert a new unverified account.

        Uses INSERT ... ON CONFLICT (email) DO NOTHING so a concurrent or
        repeated registration never overwrites the existing row. The
        database UNIQUE constraint on email decides the winner.

        Args:
            new_account: Normalized fields with password already hashed

        Returns:
            CreateResult(CREATED, account) on insert,
            CreateResult(DUPLICATE_EMAIL) if the email is taken
        """
        sql = f"""
            INSERT INTO accounts (
                name, email, password_hash, role, is_verified,
                email_verification_otp, email_verification_expires
            )
            VALUES (%s, %s, %s, %s, FALSE, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    new_account.name,
                    new_account.email,
                    new_account.password_hash,
                    new_account.role.value,
                    new_account.otp,
                    new_account.otp_expires,
                ),
            )
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return CreateResult(outcome=CreateOutcome.DUPLICATE_EMAIL)
        return CreateResult(outcome=CreateOutcome.CREATED, account=_row_to_account(row))

    def save(self, account: Account) -> None:
        """
        Persist verification fields only.

        Concurrent resend calls are last-write-wins on the OTP pair. A row
        that is already verified stays verified with no OTP, whatever the
        in-memory snapshot says.
        """
        sql = """
            UPDATE accounts
            SET is_verified = accounts.is_verified OR %(is_verified)s,
                email_verification_otp = CASE
                    WHEN accounts.is_verified OR %(is_verified)s THEN NULL
                    ELSE %(otp)s
                END,
                email_verification_expires = CASE
                    WHEN accounts.is_verified OR %(is_verified)s THEN NULL
                    ELSE %(expires)s
                END
            WHERE id = %(id)s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                {
                    "is_verified": account.is_verified,
                    "otp": account.email_verification_otp,
                    "expires": account.email_verification_expires,
                    "id": uuid.UUID(account.id),
                },
            )
            conn.commit()


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
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
