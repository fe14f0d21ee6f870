"""Schema model, validation, dependency resolution and DDL generation.

Modules:
- core.py: Identifier, enumerations, constraint specs, Column/Table/View/Schema
- exceptions.py: Error hierarchy
- validation.py: Structural and cross-entity checks
- dependency.py: Foreign key graph and creation order
- ddl_generator.py: CREATE TABLE / CREATE VIEW emission
- builder.py: Incremental construction
"""

from .builder import SchemaBuilder
from .core import (
    Column,
    ColumnType,
    ConflictPolicy,
    ForeignKeySpec,
    GeneratedMode,
    GeneratedSpec,
    Identifier,
    NotNullSpec,
    PrimaryKeySpec,
    ReferentialAction,
    Schema,
    SortOrder,
    Table,
    UniqueSpec,
    View,
    ViewColumn,
    is_valid_identifier,
)
from .ddl_generator import (
    compile_document,
    compile_table,
    compile_view,
    generate_column_ddl,
    generate_create_table_ddl,
    generate_create_view_ddl,
    generate_schema_ddl,
    render_script,
)
from .dependency import (
    build_dependency_graph,
    resolve_creation_order,
    resolve_table_order,
)
from .exceptions import (
    CyclicDependencyError,
    DocumentError,
    DuplicateColumnNameError,
    DuplicateEntityNameError,
    EmptyExpressionError,
    EmptySchemaError,
    EmptyTableError,
    EmptyViewError,
    InvalidIdentifierError,
    MultiplePrimaryKeysError,
    SchemaApplyError,
    SchemaBuilderError,
    SchemaError,
    UnresolvedForeignKeyError,
    ValidationError,
    WithoutRowidPrimaryKeyError,
)
from .validation import validate_schema, validate_table, validate_view

__all__ = [
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
    "Column",
    "Table",
    "ViewColumn",
    "View",
    "Schema",
    "SchemaBuilder",
    "validate_schema",
    "validate_table",
    "validate_view",
    "build_dependency_graph",
    "resolve_table_order",
    "resolve_creation_order",
    "generate_column_ddl",
    "generate_create_table_ddl",
    "generate_create_view_ddl",
    "generate_schema_ddl",
    "compile_table",
    "compile_view",
    "compile_document",
    "render_script",
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
