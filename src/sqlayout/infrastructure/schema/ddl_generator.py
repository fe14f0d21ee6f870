"""DDL SQL generation for schemas.

Statements are generated as a pure function of the validated, ordered
schema: the same input always yields byte-identical text. Column clauses are
emitted in a fixed order:

    "name" TYPE
      PRIMARY KEY [ASC|DESC] [ON CONFLICT ...] [AUTOINCREMENT]
      UNIQUE [ON CONFLICT ...]
      NOT NULL [ON CONFLICT ...]
      REFERENCES "table"("column") [ON DELETE ...] [ON UPDATE ...]
        [DEFERRABLE INITIALLY DEFERRED]
      GENERATED ALWAYS AS (expr) [VIRTUAL|STORED]

Returned statements carry no trailing separator; ``render_script`` joins
them into one executable script.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from sqlayout.infrastructure.sql.dialects.sqlite import SQLiteDialect
from sqlayout.utils.logging import get_logger

from .core import (
    Column,
    ForeignKeySpec,
    GeneratedSpec,
    NotNullSpec,
    PrimaryKeySpec,
    Schema,
    Table,
    UniqueSpec,
    View,
)
from .dependency import resolve_table_order
from .validation import validate_schema, validate_table, validate_view

logger = get_logger(__name__)

_DEFAULT_DIALECT = SQLiteDialect()


def _primary_key_clause(spec: PrimaryKeySpec, dialect: SQLiteDialect) -> str:
    parts = ["PRIMARY KEY"]
    if spec.order is not None:
        parts.append(dialect.sort_order(spec.order))
    if spec.on_conflict is not None:
        parts.append(dialect.on_conflict(spec.on_conflict))
    if spec.autoincrement:
        parts.append("AUTOINCREMENT")
    return " ".join(parts)


def _unique_clause(spec: UniqueSpec, dialect: SQLiteDialect) -> str:
    if spec.on_conflict is None:
        return "UNIQUE"
    return f"UNIQUE {dialect.on_conflict(spec.on_conflict)}"


def _not_null_clause(spec: NotNullSpec, dialect: SQLiteDialect) -> str:
    if spec.on_conflict is None:
        return "NOT NULL"
    return f"NOT NULL {dialect.on_conflict(spec.on_conflict)}"


def _foreign_key_clause(spec: ForeignKeySpec, dialect: SQLiteDialect) -> str:
    clause = (
        f"REFERENCES {dialect.quote(spec.foreign_table)}"
        f"({dialect.quote(spec.foreign_column)})"
    )
    if spec.on_delete is not None:
        clause += f" ON DELETE {dialect.keyword(spec.on_delete)}"
    if spec.on_update is not None:
        clause += f" ON UPDATE {dialect.keyword(spec.on_update)}"
    if spec.deferrable:
        clause += " DEFERRABLE INITIALLY DEFERRED"
    return clause


def _generated_clause(spec: GeneratedSpec, dialect: SQLiteDialect) -> str:
    clause = f"GENERATED ALWAYS AS ({spec.expr})"
    if spec.mode is not None:
        clause += f" {dialect.keyword(spec.mode)}"
    return clause


def generate_column_ddl(column: Column, dialect: Optional[SQLiteDialect] = None) -> str:
    """Render one column definition, constraints in the documented order."""
    dialect = dialect or _DEFAULT_DIALECT
    parts = [dialect.quote(column.name), dialect.keyword(column.column_type)]
    if column.primary_key is not None:
        parts.append(_primary_key_clause(column.primary_key, dialect))
    if column.unique is not None:
        parts.append(_unique_clause(column.unique, dialect))
    if column.not_null is not None:
        parts.append(_not_null_clause(column.not_null, dialect))
    if column.foreign_key is not None:
        parts.append(_foreign_key_clause(column.foreign_key, dialect))
    if column.generated is not None:
        parts.append(_generated_clause(column.generated, dialect))
    return " ".join(parts)


def generate_create_table_ddl(
    table: Table,
    if_not_exists: bool = False,
    dialect: Optional[SQLiteDialect] = None,
) -> str:
    """
    Generate the CREATE TABLE statement for an already validated table.

    Column types are not checked against table options: SQLite rejects a
    ``NUMERIC`` column in a ``STRICT`` table when the statement runs.
    """
    dialect = dialect or _DEFAULT_DIALECT
    exists_clause = "IF NOT EXISTS " if if_not_exists else ""
    columns = ", ".join(generate_column_ddl(c, dialect) for c in table.columns)
    sql = f"CREATE TABLE {exists_clause}{dialect.quote(table.name)} ({columns})"

    options: List[str] = []
    if table.without_rowid:
        options.append("WITHOUT ROWID")
    if table.strict:
        options.append("STRICT")
    if options:
        sql += " " + ", ".join(options)
    return sql


def generate_create_view_ddl(
    view: View,
    if_not_exists: bool = False,
    dialect: Optional[SQLiteDialect] = None,
) -> str:
    """Generate the CREATE VIEW statement. The select text is emitted verbatim."""
    dialect = dialect or _DEFAULT_DIALECT
    temp_clause = "TEMP " if view.temp else ""
    select = view.select.strip().rstrip(";").rstrip()
    exists_clause = "IF NOT EXISTS " if if_not_exists else ""
    return (
        f"CREATE {temp_clause}VIEW {exists_clause}{dialect.quote(view.name)} "
        f"{dialect.column_list(view.column_names)} AS {select}"
    )


def generate_schema_ddl(
    schema: Schema,
    if_not_exists: bool = False,
    allow_deferrable_cycles: bool = True,
    dialect: Optional[SQLiteDialect] = None,
) -> List[str]:
    """
    Validate, order and compile a complete schema.

    Args:
        schema: Schema to compile
        if_not_exists: Emit ``IF NOT EXISTS`` guards
        allow_deferrable_cycles: See ``resolve_table_order``
        dialect: Dialect used for quoting and keywords

    Returns:
        One statement per table (dependency order) then per view (declared order)

    Raises:
        ValidationError: If the schema is ill-formed
        CyclicDependencyError: If table creation order cannot be resolved
    """
    validate_schema(schema)
    tables = resolve_table_order(schema, allow_deferrable_cycles=allow_deferrable_cycles)

    statements = [generate_create_table_ddl(t, if_not_exists, dialect) for t in tables]
    statements.extend(generate_create_view_ddl(v, if_not_exists, dialect) for v in schema.views)

    logger.info(
        "ddl.generated",
        tables=len(tables),
        views=len(schema.views),
        order=[t.name for t in tables],
    )
    return statements


def compile_table(
    table: Table,
    if_not_exists: bool = False,
    dialect: Optional[SQLiteDialect] = None,
) -> str:
    """Validate and compile a standalone table (foreign keys to other tables are not resolved)."""
    validate_table(table)
    return generate_create_table_ddl(table, if_not_exists, dialect)


def compile_view(
    view: View,
    if_not_exists: bool = False,
    dialect: Optional[SQLiteDialect] = None,
) -> str:
    """Validate and compile a standalone view."""
    validate_view(view)
    return generate_create_view_ddl(view, if_not_exists, dialect)


def compile_document(
    document: Union[Schema, Table, View],
    if_not_exists: bool = False,
    allow_deferrable_cycles: bool = True,
    dialect: Optional[SQLiteDialect] = None,
) -> List[str]:
    """Compile any document root (schema, single table or single view) to statements."""
    if isinstance(document, Schema):
        return generate_schema_ddl(document, if_not_exists, allow_deferrable_cycles, dialect)
    if isinstance(document, Table):
        return [compile_table(document, if_not_exists, dialect)]
    if isinstance(document, View):
        return [compile_view(document, if_not_exists, dialect)]
    raise TypeError(f"Cannot compile object of type {type(document).__name__}")


def _terminate(statement: str) -> str:
    separator = SQLiteDialect.statement_separator
    # a trailing line comment would swallow the separator
    if "--" in statement.rsplit("\n", 1)[-1]:
        return f"{statement}\n{separator}"
    return f"{statement}{separator}"


def render_script(statements: Sequence[str], transaction: bool = False) -> str:
    """
    Join statements into a single script, one statement per line.

    Args:
        statements: Statements as returned by ``generate_schema_ddl``. A
            statement whose last line holds a ``--`` comment gets its
            separator on the following line.
        transaction: Wrap the script in ``BEGIN;`` / ``COMMIT;``

    Examples:
        >>> render_script(['CREATE TABLE "a" ("id" INTEGER)'])
        'CREATE TABLE "a" ("id" INTEGER);'
    """
    lines = [_terminate(statement) for statement in statements]
    if transaction:
        lines = ["BEGIN;", *lines, "COMMIT;"]
    return "\n".join(lines)


__all__ = [
    "generate_column_ddl",
    "generate_create_table_ddl",
    "generate_create_view_ddl",
    "generate_schema_ddl",
    "compile_table",
    "compile_view",
    "compile_document",
    "render_script",
]
