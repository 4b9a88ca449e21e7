"""Unit tests for run_migrations with a mocked connection pool."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from nutrisnap.adapters.repository.postgres import MIGRATIONS_DIR, run_migrations


def executed_sql(pool: MagicMock) -> list[str]:
    conn = pool.connection.return_value.__enter__.return_value
    return [c.args[0] for c in conn.execute.call_args_list]


class TestRunMigrations:
    def test_bundled_migrations_live_inside_the_package(self) -> None:
        assert MIGRATIONS_DIR.parent.name == "nutrisnap"
        assert sorted(p.name for p in MIGRATIONS_DIR.glob("*.sql")) == [
            "001_create_usuarios.sql",
            "002_create_codigos_verificacao.sql",
            "003_create_meus_dados.sql",
        ]

    def test_executes_each_bundled_file_once(self) -> None:
        pool = MagicMock()

        run_migrations(pool)

        statements = executed_sql(pool)
        assert pool.connection.called
        assert len(statements) == len(list(MIGRATIONS_DIR.glob("*.sql")))
        assert "usuarios" in statements[0]
        assert "codigos_verificacao" in statements[1]
        assert "meus_dados" in statements[2]

    def test_files_run_in_sorted_order(self, tmp_path: Path) -> None:
        (tmp_path / "002_second.sql").write_text("SELECT 2;")
        (tmp_path / "001_first.sql").write_text("SELECT 1;")
        (tmp_path / "notes.txt").write_text("ignored")
        pool = MagicMock()

        run_migrations(pool, migrations_dir=tmp_path)

        assert executed_sql(pool) == ["SELECT 1;", "SELECT 2;"]

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        pool = MagicMock()

        with pytest.raises(RuntimeError, match="Migrations directory not found"):
            run_migrations(pool, migrations_dir=tmp_path / "absent")

        pool.connection.assert_not_called()

    def test_empty_directory_is_a_no_op(self, tmp_path: Path) -> None:
        pool = MagicMock()

        run_migrations(pool, migrations_dir=tmp_path)

        pool.connection.assert_not_called()

    def test_failed_statement_is_wrapped(self, tmp_path: Path) -> None:
        (tmp_path / "001_broken.sql").write_text("CREATE TABLE;")
        pool = MagicMock()
        pool.connection.return_value.__enter__.return_value.execute.side_effect = Exception(
            "syntax error"
        )

        with pytest.raises(RuntimeError, match="001_broken.sql"):
            run_migrations(pool, migrations_dir=tmp_path)
