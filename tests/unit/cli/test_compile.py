"""
Unit tests for the compile/validate CLI.
"""

from pathlib import Path

import pytest

from sqlayout.cli.__main__ import main as cli_main
from sqlayout.cli.compile import (
    EXIT_APPLY_ERROR,
    EXIT_OK,
    EXIT_SCHEMA_ERROR,
    main as compile_main,
    validate_main,
)

pytestmark = pytest.mark.unit


class TestCompileCommand:
    """Tests for `compile`."""

    def test_prints_script(self, documents_dir: Path, capsys):
        exit_code = compile_main([str(documents_dir / "blog.yml")])

        out = capsys.readouterr().out
        assert exit_code == EXIT_OK
        lines = out.strip().splitlines()
        assert len(lines) == 4
        assert lines[0].startswith('CREATE TABLE "users"')
        assert lines[-1].startswith('CREATE VIEW "post_titles"')
        assert all(line.endswith(";") for line in lines)

    def test_flags(self, documents_dir: Path, capsys):
        exit_code = compile_main(
            [
                str(documents_dir / "single_table.xml"),
                "--if-not-exists",
                "--transaction",
                "--no-quote",
            ]
        )

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out.splitlines() == [
            "BEGIN;",
            "CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value BLOB) "
            "WITHOUT ROWID, STRICT;",
            "COMMIT;",
        ]

    def test_settings_provide_defaults(self, documents_dir: Path, capsys, monkeypatch):
        monkeypatch.setenv("SQLAYOUT_QUOTE_IDENTIFIERS", "false")
        monkeypatch.setenv("SQLAYOUT_IF_NOT_EXISTS", "true")

        compile_main([str(documents_dir / "single_table.xml")])

        assert capsys.readouterr().out.startswith("CREATE TABLE IF NOT EXISTS settings ")

    def test_output_file(self, documents_dir: Path, tmp_path: Path, capsys):
        target = tmp_path / "schema.sql"

        exit_code = compile_main([str(documents_dir / "blog.xml"), "--output", str(target)])

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out == ""
        assert target.read_text(encoding="utf-8").count("CREATE ") == 4

    def test_cycle_exits_with_schema_error(self, documents_dir: Path, capsys):
        exit_code = compile_main([str(documents_dir / "cycle.yml")])

        assert exit_code == EXIT_SCHEMA_ERROR
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "X, Y" in captured.err

    def test_execute(self, documents_dir: Path, tmp_path: Path, capsys):
        url = f"sqlite:///{tmp_path / 'app.db'}"

        exit_code = compile_main([str(documents_dir / "blog.yml"), "--execute", url])

        assert exit_code == EXIT_OK
        assert "Applied 4 statements" in capsys.readouterr().out

    def test_execute_failure(self, documents_dir: Path, tmp_path: Path, capsys):
        url = f"sqlite:///{tmp_path / 'app.db'}"
        compile_main([str(documents_dir / "blog.yml"), "--execute", url])

        exit_code = compile_main([str(documents_dir / "blog.yml"), "--execute", url])

        assert exit_code == EXIT_APPLY_ERROR
        assert "already exists" in capsys.readouterr().err

    @pytest.mark.parametrize("url", ["nosuchdb://x", "not a database url"])
    def test_execute_bad_url(self, documents_dir: Path, capsys, url):
        exit_code = compile_main([str(documents_dir / "single_table.xml"), "--execute", url])

        assert exit_code == EXIT_APPLY_ERROR
        assert "Cannot create database engine" in capsys.readouterr().err

    def test_undecodable_document(self, tmp_path: Path, capsys):
        path = tmp_path / "broken.yml"
        path.write_bytes(b"table:\n  name: t\xff\n")

        exit_code = compile_main([str(path)])

        assert exit_code == EXIT_SCHEMA_ERROR
        assert "UTF-8" in capsys.readouterr().err


class TestValidateCommand:
    """Tests for `validate`."""

    def test_valid_schema(self, documents_dir: Path, capsys):
        assert validate_main([str(documents_dir / "blog.yml")]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "OK: 3 tables, 1 views"

    def test_valid_table(self, documents_dir: Path, capsys):
        assert validate_main([str(documents_dir / "single_table.xml")]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "OK: table 'settings'"

    def test_invalid_document(self, tmp_path: Path, capsys):
        path = tmp_path / "bad.yml"
        path.write_text("schema:\n  table:\n    - name: t\n")

        assert validate_main([str(path)]) == EXIT_SCHEMA_ERROR
        assert "empty_table" in capsys.readouterr().err


class TestCommandRouting:
    """Tests for `python -m sqlayout.cli` routing."""

    def test_routes_to_compile(self, documents_dir: Path, capsys):
        assert cli_main(["compile", str(documents_dir / "single_table.xml")]) == EXIT_OK
        assert "CREATE TABLE" in capsys.readouterr().out

    def test_routes_to_validate(self, documents_dir: Path, capsys):
        assert cli_main(["validate", str(documents_dir / "cycle.yml")]) == EXIT_SCHEMA_ERROR

    def test_strict_cycles_flag_passes_through(self, tmp_path: Path, capsys):
        path = tmp_path / "deferred.yml"
        path.write_text(
            "schema:\n"
            "  table:\n"
            "    - name: a\n"
            "      column:\n"
            "        - {name: id, type: integer, pk: {}}\n"
            "        - {name: b_id, type: integer, fk: {foreign_table: b, foreign_column: id, deferrable: true}}\n"
            "    - name: b\n"
            "      column:\n"
            "        - {name: id, type: integer, pk: {}}\n"
            "        - {name: a_id, type: integer, fk: {foreign_table: a, foreign_column: id, deferrable: true}}\n"
        )

        assert cli_main(["validate", str(path)]) == EXIT_OK
        assert cli_main(["validate", str(path), "--strict-cycles"]) == EXIT_SCHEMA_ERROR

    def test_missing_command(self):
        with pytest.raises(SystemExit):
            cli_main([])
