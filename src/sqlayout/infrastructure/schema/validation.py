"""
Schema validation.

Validation is all-or-nothing: the first violated rule raises a specific
``ValidationError`` subclass naming the offending entity, and nothing is
repaired. Foreign keys are resolved by name through a lookup built once per
pass; model objects never hold references to each other.
"""

from __future__ import annotations

from typing import Dict, Optional, Set

from sqlayout.utils.logging import get_logger

from .core import Identifier, Schema, Table, View
from .exceptions import (
    DuplicateColumnNameError,
    DuplicateEntityNameError,
    EmptyExpressionError,
    EmptySchemaError,
    EmptyTableError,
    EmptyViewError,
    MultiplePrimaryKeysError,
    UnresolvedForeignKeyError,
    WithoutRowidPrimaryKeyError,
)

logger = get_logger(__name__)

TableLookup = Dict[str, Table]


def _qualified(table: str, column: str) -> str:
    return f"{table}.{column}"


def build_table_lookup(schema: Schema) -> TableLookup:
    """Map lower-cased table names to tables (SQLite names are case-insensitive)."""
    return {table.name.lower(): table for table in schema.tables}


def validate_table(table: Table, lookup: Optional[TableLookup] = None) -> None:
    """
    Validate a single table.

    Args:
        table: Table to check
        lookup: Tables of the enclosing schema. When omitted, only
            self-referencing foreign keys are resolved.

    Raises:
        ValidationError: On the first violated rule
    """
    Identifier(table.name)
    if not table.columns:
        raise EmptyTableError("Table must have at least one column", entity=table.name)

    seen: Set[str] = set()
    primary_keys = []
    for column in table.columns:
        Identifier(column.name)
        key = column.name.lower()
        if key in seen:
            raise DuplicateColumnNameError(
                f"Column '{column.name}' is declared more than once",
                entity=_qualified(table.name, column.name),
            )
        seen.add(key)
        if column.primary_key is not None:
            primary_keys.append(column.name)
        if column.generated is not None and not column.generated.expr.strip():
            raise EmptyExpressionError(
                "Generated column expression cannot be empty",
                entity=_qualified(table.name, column.name),
            )

    if len(primary_keys) > 1:
        raise MultiplePrimaryKeysError(
            f"Table can only have one primary key column, found {primary_keys}",
            entity=table.name,
        )
    if table.without_rowid and not primary_keys:
        raise WithoutRowidPrimaryKeyError(
            "Tables without rowid must have a primary key", entity=table.name
        )

    own = {table.name.lower(): table}
    _resolve_foreign_keys(table, lookup if lookup is not None else own, partial=lookup is None)


def _resolve_foreign_keys(table: Table, lookup: TableLookup, partial: bool) -> None:
    for column, fk in table.foreign_keys():
        entity = _qualified(table.name, column.name)
        target = lookup.get(fk.foreign_table.lower())
        if target is None:
            if partial:
                continue
            raise UnresolvedForeignKeyError(
                f"Foreign key references unknown table '{fk.foreign_table}'",
                entity=entity,
            )
        if target.get_column(fk.foreign_column) is None:
            raise UnresolvedForeignKeyError(
                f"Foreign key references unknown column "
                f"'{_qualified(fk.foreign_table, fk.foreign_column)}'",
                entity=entity,
            )


def validate_view(view: View) -> None:
    """Validate a single view. The select text is only checked for emptiness."""
    Identifier(view.name)
    if not view.select or not view.select.strip():
        raise EmptyExpressionError("View select cannot be empty", entity=view.name)
    if not view.columns:
        raise EmptyViewError("View must declare at least one column", entity=view.name)

    seen: Set[str] = set()
    for column in view.columns:
        Identifier(column.name)
        key = column.name.lower()
        if key in seen:
            raise DuplicateColumnNameError(
                f"View column '{column.name}' is declared more than once",
                entity=_qualified(view.name, column.name),
            )
        seen.add(key)


def validate_schema(schema: Schema) -> Schema:
    """
    Validate a complete schema.

    Args:
        schema: Schema to check

    Returns:
        The same schema, for chaining

    Raises:
        ValidationError: On the first violated rule
    """
    if not schema.tables:
        raise EmptySchemaError("Schema must contain at least one table")

    names: Set[str] = set()
    for entity in (*schema.tables, *schema.views):
        key = entity.name.lower()
        if key in names:
            raise DuplicateEntityNameError(
                f"Name '{entity.name}' is used by more than one table or view",
                entity=entity.name,
            )
        names.add(key)

    lookup = build_table_lookup(schema)
    for table in schema.tables:
        validate_table(table, lookup)
    for view in schema.views:
        validate_view(view)

    logger.debug(
        "schema.validated",
        tables=len(schema.tables),
        views=len(schema.views),
    )
    return schema


__all__ = [
    "build_table_lookup",
    "validate_table",
    "validate_view",
    "validate_schema",
]
