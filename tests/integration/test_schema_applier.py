"""
Integration tests for applying compiled DDL to a SQLite database file.
"""

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from sqlayout.infrastructure.schema.ddl_generator import generate_schema_ddl
from sqlayout.infrastructure.schema.exceptions import SchemaApplyError
from sqlayout.io.loader import ApplyResult, SchemaApplier, apply_schema

pytestmark = pytest.mark.integration


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'schema.db'}"


def _objects(url: str):
    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        return sorted(inspector.get_table_names()), sorted(inspector.get_view_names())
    finally:
        engine.dispose()


class TestSchemaApplier:
    """Tests for SchemaApplier against a real database."""

    def test_apply_creates_objects(self, blog_schema, database_url):
        applier = SchemaApplier(database_url)
        try:
            result = applier.apply(generate_schema_ddl(blog_schema))
        finally:
            applier.close()

        assert isinstance(result, ApplyResult)
        assert result.success is True
        assert result.statements_executed == 4
        assert sorted(result.created) == ["comments", "post_titles", "posts", "users"]
        assert _objects(database_url) == (["comments", "posts", "users"], ["post_titles"])

    def test_foreign_keys_enforced_by_sqlite(self, blog_schema, database_url):
        apply_schema(blog_schema, database_url)

        engine = create_engine(database_url)
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("PRAGMA foreign_keys = ON")
                with pytest.raises(IntegrityError):
                    conn.execute(text("INSERT INTO posts (id, author_id, title) VALUES (1, 99, 't')"))
        finally:
            engine.dispose()

    def test_failure_rolls_back_whole_batch(self, database_url):
        statements = [
            'CREATE TABLE "a" ("id" INTEGER PRIMARY KEY)',
            'CREATE TABLE "b" ("id" INTEGER PRIMARY KEY)',
            "CREATE TABLE broken (",
        ]
        applier = SchemaApplier(database_url)
        try:
            with pytest.raises(SchemaApplyError) as exc_info:
                applier.apply(statements)
        finally:
            applier.close()

        assert exc_info.value.statement_index == 2
        assert _objects(database_url) == ([], [])

    def test_unknown_driver_raises_apply_error(self, blog_schema):
        with pytest.raises(SchemaApplyError) as exc_info:
            apply_schema(blog_schema, "nosuchdb://host/db")
        assert exc_info.value.statement_index is None

    def test_if_not_exists_is_idempotent(self, blog_schema, database_url):
        apply_schema(blog_schema, database_url, if_not_exists=True)
        result = apply_schema(blog_schema, database_url, if_not_exists=True)

        assert result.created == []

    def test_existing_objects(self, blog_schema, database_url):
        apply_schema(blog_schema, database_url)
        applier = SchemaApplier(database_url)
        try:
            assert applier.existing_objects()[-1] == "post_titles"
        finally:
            applier.close()
