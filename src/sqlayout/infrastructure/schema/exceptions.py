"""
Exception hierarchy for schema modelling and DDL compilation.

Every failure in the pipeline is raised before any statement text is
returned, so callers either receive a complete statement list or exactly one
of these exceptions.
"""

from typing import Iterable, List, Optional, Tuple


def _with_context(message: str, **context: Optional[object]) -> str:
    parts = [f"{key}='{value}'" for key, value in context.items() if value is not None]
    if parts:
        return f"{message} ({', '.join(parts)})"
    return message


class SchemaError(Exception):
    """Base exception for all schema-related errors."""

    pass


class ValidationError(SchemaError):
    """
    Raised when a schema fails validation.

    Args:
        message: Error description
        entity: Name of the offending table, view or column
        rule: Short identifier of the violated rule
    """

    rule: str = "invalid_schema"

    def __init__(self, message: str, entity: Optional[str] = None, rule: Optional[str] = None):
        self.entity = entity
        if rule is not None:
            self.rule = rule
        super().__init__(_with_context(message, entity=entity, rule=self.rule))


class InvalidIdentifierError(ValidationError):
    """Name is empty, contains characters outside [a-zA-Z_] or uses the sqlite_ prefix."""

    rule = "invalid_identifier"


class EmptySchemaError(ValidationError):
    rule = "empty_schema"


class EmptyTableError(ValidationError):
    rule = "empty_table"


class EmptyViewError(ValidationError):
    rule = "empty_view"


class EmptyExpressionError(ValidationError):
    """A generated column expression or a view select text is blank."""

    rule = "empty_expression"


class DuplicateColumnNameError(ValidationError):
    rule = "duplicate_column_name"


class DuplicateEntityNameError(ValidationError):
    rule = "duplicate_entity_name"


class UnresolvedForeignKeyError(ValidationError):
    rule = "unresolved_foreign_key"


class MultiplePrimaryKeysError(ValidationError):
    rule = "multiple_primary_keys"


class WithoutRowidPrimaryKeyError(ValidationError):
    rule = "without_rowid_requires_primary_key"


class CyclicDependencyError(SchemaError):
    """
    Raised when tables reference each other through foreign keys in a cycle
    that cannot be broken by deferrable constraints.

    Args:
        tables: Names of every table participating in a cycle, in declaration order
    """

    def __init__(self, tables: Iterable[str]):
        self.tables: Tuple[str, ...] = tuple(tables)
        super().__init__(
            f"Cyclic foreign key dependency between tables: {', '.join(self.tables)}"
        )


class SchemaBuilderError(SchemaError):
    """Raised when the builder is asked to modify an entity it does not hold."""

    pass


class DocumentError(SchemaError):
    """
    Raised when a schema document cannot be read or violates the grammar.

    Args:
        message: Error description
        source: Path of the document, if read from disk
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(_with_context(message, source=source))


class SchemaApplyError(SchemaError):
    """
    Raised when a compiled statement fails against a live database.

    Args:
        message: Error description
        statement_index: 0-based index of the failing statement
    """

    def __init__(self, message: str, statement_index: Optional[int] = None):
        self.statement_index = statement_index
        super().__init__(_with_context(message, statement_index=statement_index))


__all__: List[str] = [
    "SchemaError",
    "ValidationError",
    "InvalidIdentifierError",
    "EmptySchemaError",
    "EmptyTableError",
    "EmptyViewError",
    "EmptyExpressionError",
    "DuplicateColumnNameError",
    "DuplicateEntityNameError",
    "UnresolvedForeignKeyError",
    "MultiplePrimaryKeysError",
    "WithoutRowidPrimaryKeyError",
    "CyclicDependencyError",
    "SchemaBuilderError",
    "DocumentError",
    "SchemaApplyError",
]
