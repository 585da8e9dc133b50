"""
PostgreSQL repository adapters - Implement the domain's repository ports.

This module provides the PostgreSQL implementations of AccountRepository
and ActivityRepository using psycopg3 with raw SQL.

Atomicity Design:
-----------------
1. **Registration**: ``INSERT ... ON CONFLICT (email) DO NOTHING RETURNING``.
   The UNIQUE constraint on email decides the winner; a conflicting insert
   returns no row. There is no SELECT-then-INSERT window.

2. **Enrollment**: one ``UPDATE ... WHERE`` appends to the JSONB
   ``enrollments`` array only if the array is shorter than ``capacity`` and
   does not already contain the account. Under READ COMMITTED a concurrent
   UPDATE of the same row waits for the first to commit and re-checks the
   WHERE clause against the new row version, so capacity and uniqueness hold
   under races. The follow-up SELECT only classifies a rejected update.

3. **Timeouts**: pool checkout, libpq connect and ``statement_timeout`` are
   all bounded (see ``create_pool``). ``psycopg.OperationalError`` (which
   includes ``PoolTimeout`` and ``QueryCanceled``) is surfaced as the domain's
   ServiceUnavailableError. Any other driver error surfaces as InternalError.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from uuid import UUID

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.exceptions import InternalError, ServiceUnavailableError
from src.domain.models import Account, Activity, EnrollmentEntry
from src.domain.ports import EnrollResult, Role

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = "id, name, surname, email, role, password_hash"
_ACTIVITY_COLUMNS = "id, name, description, capacity, scheduled_at, enrollments"


def create_pool(
    database_url: str,
    min_size: int,
    max_size: int,
    timeout: float,
    statement_timeout_ms: int,
) -> ConnectionPool:
    """
    Open the process-wide connection pool.

    Args:
        database_url: libpq connection string
        min_size: Connections kept open
        max_size: Upper bound on open connections
        timeout: Seconds to wait for a pooled connection (and to connect)
        statement_timeout_ms: Server-side limit for every statement

    Returns:
        An opened psycopg3 ConnectionPool
    """
    return ConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout,
        kwargs={
            "connect_timeout": max(int(timeout), 1),
            "options": f"-c statement_timeout={statement_timeout_ms}",
        },
        open=True,
    )


class _PostgresRepository:
    """Shared connection handling for the repositories below."""

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        """
        Borrow a pooled connection.

        Outages and timeouts become ServiceUnavailableError; any other
        driver error becomes InternalError so SQL and connection details
        stay out of responses.
        """
        try:
            with self._pool.connection() as conn:
                yield conn
        except psycopg.OperationalError as e:
            logger.error("Database unavailable: %s", type(e).__name__)
            raise ServiceUnavailableError("Base de datos no disponible") from e
        except psycopg.Error as e:
            logger.exception("Database error: %s", type(e).__name__)
            raise InternalError("Error de base de datos") from e


class PostgresAccountRepository(_PostgresRepository):
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def create(
        self, name: str, surname: str, email: str, password_hash: str, role: Role
    ) -> Account | None:
        """
        Insert an account unless the email is taken.

        Returns:
            The created Account, or None when the UNIQUE(email) constraint
            rejected the row
        """
        sql = f"""
            INSERT INTO accounts (name, surname, email, role, password_hash)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (name, surname, email, role.value, password_hash))
            row = cursor.fetchone()
            conn.commit()

        return _account_from_row(row) if row is not None else None

    def get_by_email(self, email: str) -> Account | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s"

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        return _account_from_row(row) if row is not None else None

    def exists(self, account_id: UUID) -> bool:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM accounts WHERE id = %s", (account_id,))
            return cursor.fetchone() is not None


class PostgresActivityRepository(_PostgresRepository):
    """
    Implements ActivityRepository protocol via psycopg3.

    Enrollment entries live in a JSONB array on the activity row so that
    the capacity and duplicate checks apply to the same row the append
    writes.
    """

    def create(
        self, name: str, description: str, capacity: int, scheduled_at: datetime
    ) -> Activity:
        sql = f"""
            INSERT INTO activities (name, description, capacity, scheduled_at)
            VALUES (%s, %s, %s, %s)
            RETURNING {_ACTIVITY_COLUMNS}
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (name, description, capacity, scheduled_at))
            row = cursor.fetchone()
            conn.commit()

        return _activity_from_row(row)

    def enroll(
        self, activity_id: UUID, account_id: UUID, signed_up_at: str
    ) -> EnrollResult:
        """
        Append an enrollment entry with a single conditional UPDATE.

        Args:
            activity_id: Target activity
            account_id: Enrolling account (existence checked by the caller)
            signed_up_at: Server-assigned UTC timestamp string

        Returns:
            SUCCESS if appended; otherwise NOT_FOUND, ALREADY_ENROLLED or FULL
        """
        entry = Jsonb([{"account_id": str(account_id), "signed_up_at": signed_up_at}])
        match = Jsonb([{"account_id": str(account_id)}])

        append_sql = """
            UPDATE activities
            SET enrollments = enrollments || %(entry)s
            WHERE id = %(activity_id)s
              AND jsonb_array_length(enrollments) < capacity
              AND NOT enrollments @> %(match)s
        """

        # Only reached when the UPDATE matched nothing
        classify_sql = """
            SELECT enrollments @> %(match)s
            FROM activities
            WHERE id = %(activity_id)s
        """

        params = {"entry": entry, "match": match, "activity_id": activity_id}

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(append_sql, params)
            if cursor.rowcount == 1:
                conn.commit()
                return EnrollResult.SUCCESS

            cursor.execute(classify_sql, params)
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return EnrollResult.NOT_FOUND
        if row[0]:
            return EnrollResult.ALREADY_ENROLLED
        return EnrollResult.FULL

    def list_all(self) -> list[Activity]:
        sql = f"SELECT {_ACTIVITY_COLUMNS} FROM activities ORDER BY seq"

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql)
            rows = cursor.fetchall()

        return [_activity_from_row(row) for row in rows]

    def list_for_account(self, account_id: UUID) -> list[Activity]:
        sql = f"""
            SELECT {_ACTIVITY_COLUMNS}
            FROM activities
            WHERE enrollments @> %s
            ORDER BY seq
        """

        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (Jsonb([{"account_id": str(account_id)}]),))
            rows = cursor.fetchall()

        return [_activity_from_row(row) for row in rows]


def _account_from_row(row: tuple) -> Account:
    account_id, name, surname, email, role, password_hash = row
    return Account(
        id=account_id,
        name=name,
        surname=surname,
        email=email,
        role=Role(role),
        password_hash=password_hash,
    )


def _activity_from_row(row: tuple) -> Activity:
    activity_id, name, description, capacity, scheduled_at, enrollments = row
    return Activity(
        id=activity_id,
        name=name,
        description=description,
        capacity=capacity,
        scheduled_at=scheduled_at,
        enrollments=tuple(
            EnrollmentEntry(
                account_id=UUID(entry["account_id"]),
                signed_up_at=entry["signed_up_at"],
            )
            for entry in enrollments
        ),
    )


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
