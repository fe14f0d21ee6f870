"""Core schema types for sqlayout.

Model objects are frozen dataclasses holding tuples, so a finished Schema is a
value that the resolver and the DDL generator only ever read. Names are
coerced to ``Identifier`` on construction and enum-typed fields accept either
the enum member or its textual value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from .exceptions import InvalidIdentifierError

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_]+$")
RESERVED_PREFIX = "sqlite_"

E = TypeVar("E", bound="_SchemaEnum")


class Identifier(str):
    """
    A validated schema object name.

    Identifiers are non-empty, consist of ASCII letters and underscores only,
    and never start with the ``sqlite_`` prefix SQLite reserves for its own
    objects (checked case-insensitively).

    Examples:
        >>> Identifier("users")
        'users'
        >>> Identifier("sqlite_index")
        Traceback (most recent call last):
        ...
        InvalidIdentifierError: ...
    """

    def __new__(cls, value: str) -> "Identifier":
        if isinstance(value, Identifier):
            return value
        if not isinstance(value, str) or not value:
            raise InvalidIdentifierError("Identifier cannot be empty", entity=repr(value))
        if not IDENTIFIER_PATTERN.match(value):
            raise InvalidIdentifierError(
                "Identifier may only contain letters and underscores", entity=value
            )
        if value.lower().startswith(RESERVED_PREFIX):
            raise InvalidIdentifierError(
                f"Identifier cannot start with reserved prefix '{RESERVED_PREFIX}'",
                entity=value,
            )
        return super().__new__(cls, value)


def is_valid_identifier(value: object) -> bool:
    """Return True if ``value`` would be accepted as an Identifier."""
    try:
        Identifier(value)  # type: ignore[arg-type]
    except InvalidIdentifierError:
        return False
    return True


class _SchemaEnum(Enum):
    """Enum with lenient text lookup (``"Set Null"``, ``"set_null"``, ``"SET-NULL"``)."""

    @classmethod
    def from_str(cls: Type[E], value: Union[str, E]) -> E:
        """Convert a textual value to the enum member.

        Raises:
            ValueError: If value does not name a member
        """
        if isinstance(value, cls):
            return value
        normalized = re.sub(r"[\s_]+", "-", str(value).strip().lower())
        for member in cls:
            if member.value == normalized:
                return member
        valid = [m.value for m in cls]
        raise ValueError(f"Invalid {cls.__name__} '{value}'. Valid values: {valid}")


class ColumnType(_SchemaEnum):
    """SQLite storage classes usable as column types."""

    BLOB = "blob"
    NUMERIC = "numeric"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"


class SortOrder(_SchemaEnum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class ConflictPolicy(_SchemaEnum):
    """Resolution strategy for a violated constraint (``ON CONFLICT``)."""

    ROLLBACK = "rollback"
    ABORT = "abort"
    FAIL = "fail"
    IGNORE = "ignore"
    REPLACE = "replace"


class ReferentialAction(_SchemaEnum):
    """Foreign key action for ``ON DELETE`` / ``ON UPDATE``."""

    SET_NULL = "set-null"
    SET_DEFAULT = "set-default"
    CASCADE = "cascade"
    RESTRICT = "restrict"
    NO_ACTION = "no-action"


class GeneratedMode(_SchemaEnum):
    VIRTUAL = "virtual"
    STORED = "stored"


def _coerce(enum_cls: Type[E], value: Union[str, E, None]) -> Optional[E]:
    if value is None:
        return None
    return enum_cls.from_str(value)


def _set(instance: object, name: str, value: object) -> None:
    object.__setattr__(instance, name, value)


@dataclass(frozen=True)
class PrimaryKeySpec:
    """Marks a column as the table's primary key."""

    order: Optional[SortOrder] = None
    on_conflict: Optional[ConflictPolicy] = None
    autoincrement: bool = False

    def __post_init__(self) -> None:
        _set(self, "order", _coerce(SortOrder, self.order))
        _set(self, "on_conflict", _coerce(ConflictPolicy, self.on_conflict))


@dataclass(frozen=True)
class ForeignKeySpec:
    """
    Named reference from a column to a column of another (or the same) table.

    The target is resolved by name during validation; it is never a pointer
    to the referenced Table.
    """

    foreign_table: str
    foreign_column: str
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None
    deferrable: bool = False

    def __post_init__(self) -> None:
        _set(self, "foreign_table", Identifier(self.foreign_table))
        _set(self, "foreign_column", Identifier(self.foreign_column))
        _set(self, "on_delete", _coerce(ReferentialAction, self.on_delete))
        _set(self, "on_update", _coerce(ReferentialAction, self.on_update))


@dataclass(frozen=True)
class UniqueSpec:
    on_conflict: Optional[ConflictPolicy] = None

    def __post_init__(self) -> None:
        _set(self, "on_conflict", _coerce(ConflictPolicy, self.on_conflict))


@dataclass(frozen=True)
class NotNullSpec:
    on_conflict: Optional[ConflictPolicy] = None

    def __post_init__(self) -> None:
        _set(self, "on_conflict", _coerce(ConflictPolicy, self.on_conflict))


@dataclass(frozen=True)
class GeneratedSpec:
    """Generated column expression. ``expr`` is passed through verbatim."""

    expr: str
    mode: Optional[GeneratedMode] = None

    def __post_init__(self) -> None:
        _set(self, "mode", _coerce(GeneratedMode, self.mode))


ConstraintSpec = Union[PrimaryKeySpec, ForeignKeySpec, UniqueSpec, NotNullSpec, GeneratedSpec]

# Column attribute holding each constraint kind
CONSTRAINT_SLOTS: Dict[type, str] = {
    PrimaryKeySpec: "primary_key",
    ForeignKeySpec: "foreign_key",
    UniqueSpec: "unique",
    NotNullSpec: "not_null",
    GeneratedSpec: "generated",
}


@dataclass(frozen=True)
class Column:
    """A typed table column with up to one constraint of each kind."""

    name: str
    column_type: ColumnType
    primary_key: Optional[PrimaryKeySpec] = None
    foreign_key: Optional[ForeignKeySpec] = None
    unique: Optional[UniqueSpec] = None
    not_null: Optional[NotNullSpec] = None
    generated: Optional[GeneratedSpec] = None

    def __post_init__(self) -> None:
        _set(self, "name", Identifier(self.name))
        _set(self, "column_type", ColumnType.from_str(self.column_type))

    def constraints(self) -> List[ConstraintSpec]:
        """Attached constraint specs, in slot order."""
        specs = (getattr(self, slot) for slot in CONSTRAINT_SLOTS.values())
        return [spec for spec in specs if spec is not None]


@dataclass(frozen=True)
class Table:
    """An ordered collection of columns plus table-level options."""

    name: str
    columns: Tuple[Column, ...] = ()
    without_rowid: bool = False
    strict: bool = False

    def __post_init__(self) -> None:
        _set(self, "name", Identifier(self.name))
        _set(self, "columns", tuple(self.columns))

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name.lower() == name.lower():
                return column
        return None

    def foreign_keys(self) -> Iterator[Tuple[Column, ForeignKeySpec]]:
        """Yield ``(column, spec)`` for every column carrying a foreign key."""
        for column in self.columns:
            if column.foreign_key is not None:
                yield column, column.foreign_key


@dataclass(frozen=True)
class ViewColumn:
    name: str

    def __post_init__(self) -> None:
        _set(self, "name", Identifier(self.name))


@dataclass(frozen=True)
class View:
    """A named projection over an opaque select statement."""

    name: str
    select: str
    columns: Tuple[ViewColumn, ...] = ()
    temp: bool = False

    def __post_init__(self) -> None:
        _set(self, "name", Identifier(self.name))
        _set(
            self,
            "columns",
            tuple(c if isinstance(c, ViewColumn) else ViewColumn(c) for c in self.columns),
        )

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


@dataclass(frozen=True)
class Schema:
    """Root aggregate: all tables, then all views, in declaration order."""

    tables: Tuple[Table, ...] = ()
    views: Tuple[View, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        _set(self, "tables", tuple(self.tables))
        _set(self, "views", tuple(self.views))

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name.lower() == name.lower():
                return table
        return None


__all__ = [
    "IDENTIFIER_PATTERN",
    "RESERVED_PREFIX",
    "Identifier",
    "is_valid_identifier",
    "ColumnType",
    "SortOrder",
    "ConflictPolicy",
    "ReferentialAction",
    "GeneratedMode",
    "PrimaryKeySpec",
    "ForeignKeySpec",
    "UniqueSpec",
    "NotNullSpec",
    "GeneratedSpec",
    "ConstraintSpec",
    "CONSTRAINT_SLOTS",
    "Column",
    "Table",
    "ViewColumn",
    "View",
    "Schema",
]
