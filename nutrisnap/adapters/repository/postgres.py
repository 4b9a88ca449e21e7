"""
PostgreSQL pending-registration adapter - Implements PendingRegistrationRepository.

This module provides the PostgreSQL implementation of the domain's
pending-registration port using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **upsert** is a single INSERT ... ON CONFLICT (email) DO UPDATE, so two
   registrations for the same email never interleave a read and a write.
   Last write wins.

2. **verify_and_consume** locks the row with SELECT ... FOR UPDATE inside
   one transaction and deletes it before committing. A concurrent verifier
   blocks on the lock and then finds no row, so exactly one caller observes
   success for a given record.

3. **Expiry** is evaluated with database time (NOW() > expira_em), the same
   clock that wrote the row.

4. **Code comparison** uses secrets.compare_digest.
"""

import logging
import secrets
from pathlib import Path

from psycopg_pool import ConnectionPool

from nutrisnap.domain.ports import (
    PendingRegistration,
    VerificationExpired,
    VerificationInvalid,
    VerificationOutcome,
    VerificationSuccess,
)

logger = logging.getLogger(__name__)


class PostgresPendingRegistrationRepository:
    """
    Implements PendingRegistrationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool, ttl_minutes: int = 15) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            ttl_minutes: Lifetime of a verification code
        """
        self._pool = pool
        self._ttl_minutes = ttl_minutes

    def upsert(self, name: str, email: str, password_hash: str, code: str) -> None:
        sql = """
            INSERT INTO codigos_verificacao (nome, email, senha_hash, codigo, expira_em, criado_em)
            VALUES (%s, %s, %s, %s, NOW() + make_interval(mins => %s), NOW())
            ON CONFLICT (email) DO UPDATE
            SET nome = EXCLUDED.nome,
                senha_hash = EXCLUDED.senha_hash,
                codigo = EXCLUDED.codigo,
                expira_em = EXCLUDED.expira_em,
                criado_em = EXCLUDED.criado_em
        """

        with self._pool.connection() as conn:
            conn.execute(sql, (name, email, password_hash, code, self._ttl_minutes))
            conn.commit()

    def find(self, email: str) -> PendingRegistration | None:
        sql = """
            SELECT nome, email, senha_hash, codigo, expira_em, criado_em
            FROM codigos_verificacao
            WHERE email = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        if row is None:
            return None
        return PendingRegistration(
            name=row[0],
            email=row[1],
            password_hash=row[2],
            code=row[3],
            expires_at=row[4],
            created_at=row[5],
        )

    def verify_and_consume(self, email: str, code: str) -> VerificationOutcome:
        """
        Check code and consume the pending record on success.

        Uses SELECT FOR UPDATE to lock the row during verification,
        preventing two concurrent verifiers from both committing.

        Args:
            email: Normalized email address
            code: Submitted 6-digit code

        Returns:
            VerificationSuccess, VerificationExpired or VerificationInvalid
        """
        select_sql = """
            SELECT nome, email, senha_hash, codigo, NOW() > expira_em AS expirado
            FROM codigos_verificacao
            WHERE email = %s
            FOR UPDATE
        """
        delete_sql = "DELETE FROM codigos_verificacao WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(select_sql, (email,))
            row = cursor.fetchone()

            if row is None:
                conn.commit()
                return VerificationInvalid()

            name, stored_email, password_hash, stored_code, expired = row

            if expired:
                cursor.execute(delete_sql, (email,))
                conn.commit()
                return VerificationExpired()

            if not secrets.compare_digest(stored_code.encode(), code.encode()):
                # Record kept: retries are allowed until expiry
                conn.commit()
                return VerificationInvalid()

            cursor.execute(delete_sql, (email,))
            conn.commit()
            return VerificationSuccess(name=name, email=stored_email, password_hash=password_hash)

    def delete(self, email: str) -> None:
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM codigos_verificacao WHERE email = %s", (email,))
            conn.commit()


MIGRATIONS_DIR = Path(__file__).parents[2] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
        migrations_dir: Directory holding the *.sql files; defaults to the
            nutrisnap/migrations package data

    Raises:
        RuntimeError: If the directory is missing or a migration fails
    """
    if not migrations_dir.is_dir():
        logger.error(f"Migrations directory not found: {migrations_dir}")
        raise RuntimeError(f"Migrations directory not found: {migrations_dir}")

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
