"""Incremental schema construction.

The builder is the only mutable surface of the schema model. Identifier and
enum errors surface as soon as a name or value is passed in; cross-entity
rules (foreign key targets, duplicates, primary key count) are checked by
``build()``, which returns an immutable, validated ``Schema``.

Example:
    >>> schema = (
    ...     SchemaBuilder()
    ...     .add_table("users")
    ...     .add_column("users", "id", "integer", primary_key=PrimaryKeySpec())
    ...     .add_table("posts")
    ...     .add_column("posts", "id", ColumnType.INTEGER, primary_key=PrimaryKeySpec())
    ...     .add_column("posts", "author_id", "integer")
    ...     .set_constraint("posts", "author_id", ForeignKeySpec("users", "id"))
    ...     .build()
    ... )
    >>> schema.table_names
    ['users', 'posts']
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Union

from sqlayout.utils.logging import get_logger

from .core import (
    CONSTRAINT_SLOTS,
    Column,
    ColumnType,
    ConstraintSpec,
    ForeignKeySpec,
    GeneratedSpec,
    Identifier,
    NotNullSpec,
    PrimaryKeySpec,
    Schema,
    Table,
    UniqueSpec,
    View,
    ViewColumn,
)
from .exceptions import SchemaBuilderError
from .validation import validate_schema

logger = get_logger(__name__)


@dataclass
class _TableDraft:
    name: Identifier
    without_rowid: bool = False
    strict: bool = False
    columns: List[Column] = field(default_factory=list)

    def index_of(self, column_name: str) -> int:
        for i, column in enumerate(self.columns):
            if column.name.lower() == column_name.lower():
                return i
        raise SchemaBuilderError(f"Table '{self.name}' has no column '{column_name}'")


class SchemaBuilder:
    """Builder-style construction of a ``Schema``."""

    def __init__(self) -> None:
        self._tables: Dict[str, _TableDraft] = {}
        self._views: List[View] = []

    def _draft(self, table_name: str) -> _TableDraft:
        try:
            return self._tables[table_name.lower()]
        except KeyError:
            raise SchemaBuilderError(
                f"Table '{table_name}' not found. Available: {list(self.table_names)}"
            ) from None

    @property
    def table_names(self) -> List[str]:
        return [draft.name for draft in self._tables.values()]

    def add_table(
        self, name: str, without_rowid: bool = False, strict: bool = False
    ) -> "SchemaBuilder":
        """Declare a new, initially empty table."""
        identifier = Identifier(name)
        if identifier.lower() in self._tables:
            raise SchemaBuilderError(f"Table '{name}' is already declared")
        self._tables[identifier.lower()] = _TableDraft(identifier, without_rowid, strict)
        return self

    def add_column(
        self,
        table_name: str,
        name: str,
        column_type: Union[ColumnType, str],
        primary_key: Optional[PrimaryKeySpec] = None,
        foreign_key: Optional[ForeignKeySpec] = None,
        unique: Optional[UniqueSpec] = None,
        not_null: Optional[NotNullSpec] = None,
        generated: Optional[GeneratedSpec] = None,
    ) -> "SchemaBuilder":
        """Append a column to ``table_name``."""
        column = Column(
            name=name,
            column_type=column_type,
            primary_key=primary_key,
            foreign_key=foreign_key,
            unique=unique,
            not_null=not_null,
            generated=generated,
        )
        self._draft(table_name).columns.append(column)
        return self

    def set_constraint(
        self, table_name: str, column_name: str, spec: ConstraintSpec
    ) -> "SchemaBuilder":
        """Attach ``spec`` to its slot on a column, replacing any spec of the same kind."""
        slot = CONSTRAINT_SLOTS.get(type(spec))
        if slot is None:
            raise SchemaBuilderError(f"Unsupported constraint type: {type(spec).__name__}")
        draft = self._draft(table_name)
        index = draft.index_of(column_name)
        current = draft.columns[index]
        if getattr(current, slot) is not None:
            logger.debug(
                "schema.builder.constraint_replaced",
                table=draft.name,
                column=current.name,
                constraint=slot,
            )
        draft.columns[index] = replace(current, **{slot: spec})
        return self

    def remove_constraint(
        self, table_name: str, column_name: str, kind: type
    ) -> "SchemaBuilder":
        """Clear the slot for constraint class ``kind`` (e.g. ``UniqueSpec``)."""
        slot = CONSTRAINT_SLOTS.get(kind)
        if slot is None:
            raise SchemaBuilderError(f"Unsupported constraint type: {getattr(kind, '__name__', kind)}")
        draft = self._draft(table_name)
        index = draft.index_of(column_name)
        draft.columns[index] = replace(draft.columns[index], **{slot: None})
        return self

    def set_table_options(
        self,
        table_name: str,
        without_rowid: Optional[bool] = None,
        strict: Optional[bool] = None,
    ) -> "SchemaBuilder":
        draft = self._draft(table_name)
        if without_rowid is not None:
            draft.without_rowid = without_rowid
        if strict is not None:
            draft.strict = strict
        return self

    def add_view(
        self,
        name: str,
        select: str,
        columns: Sequence[Union[str, ViewColumn]],
        temp: bool = False,
    ) -> "SchemaBuilder":
        """Append a view. Views are emitted in the order they are added."""
        self._views.append(View(name=name, select=select, columns=tuple(columns), temp=temp))
        return self

    def build(self) -> Schema:
        """
        Finalize the schema.

        Returns:
            Immutable, validated Schema

        Raises:
            ValidationError: If the assembled schema violates any rule
        """
        tables = tuple(
            Table(
                name=draft.name,
                columns=tuple(draft.columns),
                without_rowid=draft.without_rowid,
                strict=draft.strict,
            )
            for draft in self._tables.values()
        )
        schema = Schema(tables=tables, views=tuple(self._views))
        return validate_schema(schema)


__all__ = ["SchemaBuilder"]
