"""Execution sink: applies compiled statements to a database."""

from .models import ApplyResult
from .schema_applier import SchemaApplier, apply_schema

__all__ = [
    "ApplyResult",
    "SchemaApplier",
    "apply_schema",
]
