"""
Apply compiled DDL to a live database.

The applier runs every statement inside one transaction and rolls the whole
batch back on the first failure. pysqlite would otherwise commit DDL
implicitly, so for SQLite engines the driver's own transaction handling is
disabled and SQLAlchemy emits ``BEGIN`` itself (the recipe from the
SQLAlchemy SQLite dialect documentation).
"""

import time
from typing import Optional, Sequence

from sqlalchemy import Engine, create_engine, event, inspect
from sqlalchemy.exc import SQLAlchemyError

from sqlayout.infrastructure.schema.core import Schema
from sqlayout.infrastructure.schema.ddl_generator import generate_schema_ddl
from sqlayout.infrastructure.schema.exceptions import SchemaApplyError
from sqlayout.infrastructure.sql.dialects.sqlite import SQLiteDialect
from sqlayout.io.loader.models import ApplyResult
from sqlayout.utils.logging import get_logger, redact_url

logger = get_logger(__name__)


def _enable_transactional_ddl(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


class SchemaApplier:
    """
    Transactional executor for compiled schema statements.

    Attributes:
        engine: SQLAlchemy Engine. Created from ``database_url`` unless given.

    Example:
        >>> applier = SchemaApplier("sqlite:///app.db")
        >>> result = applier.apply(generate_schema_ddl(schema))
        >>> result.created
        ['users', 'posts']
    """

    def __init__(self, database_url: str = "sqlite://", engine: Optional[Engine] = None):
        """
        Raises:
            SchemaApplyError: If no engine can be created for ``database_url``
        """
        self.database_url = database_url
        if engine is None:
            try:
                engine = create_engine(database_url)
            except SQLAlchemyError as e:
                logger.error(
                    "database.engine.failed",
                    database=redact_url(database_url),
                    error=str(e),
                )
                raise SchemaApplyError(f"Cannot create database engine: {e}") from e
            if engine.dialect.name == "sqlite":
                _enable_transactional_ddl(engine)
        self.engine = engine
        self._logger = logger.bind(database=redact_url(str(engine.url)))

    def existing_objects(self) -> list:
        """Names of tables and views currently present, tables first."""
        inspector = inspect(self.engine)
        return [*inspector.get_table_names(), *inspector.get_view_names()]

    def apply(self, statements: Sequence[str]) -> ApplyResult:
        """
        Execute ``statements`` in order within a single transaction.

        Args:
            statements: Statements without trailing separators

        Returns:
            ApplyResult describing the executed batch

        Raises:
            SchemaApplyError: If any statement fails; nothing is committed
        """
        start = time.perf_counter()
        index = -1
        try:
            before = set(self.existing_objects())
            with self.engine.begin() as conn:
                for index, statement in enumerate(statements):
                    conn.exec_driver_sql(statement)
        except SQLAlchemyError as e:
            self._logger.error(
                "database.apply.failed",
                statement_index=index,
                error=str(getattr(e, "orig", None) or e),
            )
            raise SchemaApplyError(
                f"Failed to apply statement: {getattr(e, 'orig', None) or e}",
                statement_index=index if index >= 0 else None,
            ) from e

        created = [name for name in self.existing_objects() if name not in before]
        duration_ms = (time.perf_counter() - start) * 1000
        self._logger.info(
            "database.apply.completed",
            statements=len(statements),
            created=created,
            duration_ms=round(duration_ms, 2),
        )
        return ApplyResult(
            success=True,
            statements_executed=len(statements),
            duration_ms=duration_ms,
            database=redact_url(str(self.engine.url)),
            created=created,
        )

    def close(self) -> None:
        self.engine.dispose()


def apply_schema(
    schema: Schema,
    database_url: str,
    if_not_exists: bool = False,
    allow_deferrable_cycles: bool = True,
    dialect: Optional[SQLiteDialect] = None,
) -> ApplyResult:
    """Compile ``schema`` and apply it to ``database_url``."""
    statements = generate_schema_ddl(
        schema,
        if_not_exists=if_not_exists,
        allow_deferrable_cycles=allow_deferrable_cycles,
        dialect=dialect,
    )
    applier = SchemaApplier(database_url)
    try:
        return applier.apply(statements)
    finally:
        applier.close()


__all__ = ["SchemaApplier", "apply_schema"]
