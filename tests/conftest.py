"""Shared pytest fixtures for the sqlayout test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlayout.config import get_settings
from sqlayout.infrastructure.schema import (
    ColumnType,
    ConflictPolicy,
    ForeignKeySpec,
    GeneratedSpec,
    NotNullSpec,
    PrimaryKeySpec,
    Schema,
    SchemaBuilder,
    UniqueSpec,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Isolate every test from SQLAYOUT_* variables and the settings cache."""
    for name in (
        "SQLAYOUT_QUOTE_IDENTIFIERS",
        "SQLAYOUT_IF_NOT_EXISTS",
        "SQLAYOUT_TRANSACTION",
        "SQLAYOUT_ALLOW_DEFERRABLE_CYCLES",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def documents_dir() -> Path:
    return FIXTURES_DIR / "documents"


@pytest.fixture
def blog_schema() -> Schema:
    """users <- posts <- comments, plus a view, declared out of dependency order."""
    return (
        SchemaBuilder()
        .add_table("comments")
        .add_column("comments", "id", ColumnType.INTEGER, primary_key=PrimaryKeySpec())
        .add_column(
            "comments",
            "post_id",
            ColumnType.INTEGER,
            foreign_key=ForeignKeySpec("posts", "id", on_delete="cascade"),
            not_null=NotNullSpec(),
        )
        .add_column("comments", "body", ColumnType.TEXT)
        .add_table("users")
        .add_column(
            "users",
            "id",
            ColumnType.INTEGER,
            primary_key=PrimaryKeySpec(autoincrement=True),
        )
        .add_column(
            "users",
            "email",
            ColumnType.TEXT,
            unique=UniqueSpec(on_conflict=ConflictPolicy.IGNORE),
            not_null=NotNullSpec(),
        )
        .add_column(
            "users",
            "email_domain",
            ColumnType.TEXT,
            generated=GeneratedSpec("substr(email, instr(email, '@') + 1)", "stored"),
        )
        .add_table("posts")
        .add_column("posts", "id", ColumnType.INTEGER, primary_key=PrimaryKeySpec())
        .add_column(
            "posts",
            "author_id",
            ColumnType.INTEGER,
            foreign_key=ForeignKeySpec("users", "id"),
        )
        .add_column("posts", "title", ColumnType.TEXT, not_null=NotNullSpec())
        .add_view(
            "post_titles",
            "SELECT p.id, p.title FROM posts p",
            ["id", "title"],
        )
        .build()
    )
