"""
PostgreSQL account adapter - Implements AccountRepository protocol.

Committed accounts live in `usuarios` (unique email); quiz answers live in
`meus_dados`, one row per account.
"""

import logging

from psycopg import errors
from psycopg_pool import ConnectionPool

from nutrisnap.domain.exceptions import ConflictError, EmailInUseError, NotFoundError
from nutrisnap.domain.ports import Account, ExternalIdentity, Profile, ProfileData

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = "id, nome, email, senha_hash, email_verificado, foto, criado_em, atualizado_em"


def _row_to_account(row: tuple) -> Account:
    return Account(
        id=row[0],
        name=row[1],
        email=row[2],
        password_hash=row[3],
        email_verified=row[4],
        photo=row[5],
        created_at=row[6],
        updated_at=row[7],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uniqueness of email is enforced by the database constraint; conflicts
    surface as ConflictError rather than driver exceptions.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"SELECT {_ACCOUNT_COLUMNS} FROM usuarios WHERE email = %s", email)

    def find_by_id(self, account_id: int) -> Account | None:
        return self._fetch_one(f"SELECT {_ACCOUNT_COLUMNS} FROM usuarios WHERE id = %s", account_id)

    def create_from_hash(
        self, name: str, email: str, password_hash: str, email_verified: bool = True
    ) -> Account:
        """
        Insert a new account, or overwrite an unverified row for the email.

        ON CONFLICT ... WHERE only touches rows that were never verified, so
        a verified owner makes the statement return no row.
        """
        sql = f"""
            INSERT INTO usuarios (nome, email, senha_hash, email_verificado, criado_em, atualizado_em)
            VALUES (%s, %s, %s, %s, NOW(), NOW())
            ON CONFLICT (email) DO UPDATE
            SET nome = EXCLUDED.nome,
                senha_hash = EXCLUDED.senha_hash,
                email_verificado = EXCLUDED.email_verificado,
                atualizado_em = NOW()
            WHERE usuarios.email_verificado = FALSE
            RETURNING {_ACCOUNT_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (name, email, password_hash, email_verified))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            raise ConflictError(email)
        return _row_to_account(row)

    def create_from_identity(self, identity: ExternalIdentity) -> Account:
        sql = f"""
            INSERT INTO usuarios (nome, email, senha_hash, email_verificado, foto, criado_em, atualizado_em)
            VALUES (%s, %s, NULL, TRUE, %s, NOW(), NOW())
            ON CONFLICT (email) DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (identity.name, identity.email.strip().lower(), identity.picture))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            raise ConflictError(identity.email)
        return _row_to_account(row)

    def mark_email_verified(self, account_id: int) -> None:
        with self._pool.connection() as conn:
            conn.execute(
                "UPDATE usuarios SET email_verificado = TRUE, atualizado_em = NOW() WHERE id = %s",
                (account_id,),
            )
            conn.commit()

    def get_profile(self, account_id: int) -> Profile | None:
        sql = """
            SELECT u.id, u.nome, u.email, u.senha_hash, u.email_verificado, u.foto,
                   u.criado_em, u.atualizado_em,
                   d.idade, d.sexo, d.altura, d.peso_atual, d.peso_meta,
                   d.objetivo, d.nivel_atividade
            FROM usuarios u
            LEFT JOIN meus_dados d ON d.id_usuario = u.id
            WHERE u.id = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account_id,))
            row = cursor.fetchone()

        if row is None:
            return None
        return Profile(account=_row_to_account(row[:8]), data=ProfileData(*row[8:]))

    def update_profile(
        self, account_id: int, name: str, email: str, data: ProfileData | None
    ) -> None:
        """
        Update name/email and upsert quiz answers in one transaction.

        Raises:
            EmailInUseError: Another account owns the email
            NotFoundError: No account with this id
        """
        taken_sql = "SELECT 1 FROM usuarios WHERE email = %s AND id <> %s"
        update_sql = """
            UPDATE usuarios SET nome = %s, email = %s, atualizado_em = NOW()
            WHERE id = %s
        """
        quiz_sql = """
            INSERT INTO meus_dados (id_usuario, idade, sexo, altura, peso_atual, peso_meta,
                                    objetivo, nivel_atividade)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (id_usuario) DO UPDATE
            SET idade = EXCLUDED.idade,
                sexo = EXCLUDED.sexo,
                altura = EXCLUDED.altura,
                peso_atual = EXCLUDED.peso_atual,
                peso_meta = EXCLUDED.peso_meta,
                objetivo = EXCLUDED.objetivo,
                nivel_atividade = EXCLUDED.nivel_atividade,
                atualizado_em = NOW()
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(taken_sql, (email, account_id))
            if cursor.fetchone() is not None:
                conn.rollback()
                raise EmailInUseError(email)

            try:
                cursor.execute(update_sql, (name, email, account_id))
            except errors.UniqueViolation as e:
                conn.rollback()
                raise EmailInUseError(email) from e

            if cursor.rowcount == 0:
                conn.rollback()
                raise NotFoundError(str(account_id))

            if data is not None:
                cursor.execute(
                    quiz_sql,
                    (
                        account_id,
                        data.age,
                        data.sex,
                        data.height,
                        data.current_weight,
                        data.target_weight,
                        data.goal,
                        data.activity_level,
                    ),
                )
            conn.commit()

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        with self._pool.connection() as conn:
            conn.execute(
                "UPDATE usuarios SET senha_hash = %s, atualizado_em = NOW() WHERE id = %s",
                (password_hash, account_id),
            )
            conn.commit()

    def _fetch_one(self, sql: str, value: object) -> Account | None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (value,))
            row = cursor.fetchone()
        return _row_to_account(row) if row is not None else None
