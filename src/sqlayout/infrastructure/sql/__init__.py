"""
SQL module for centralized SQL generation.

This module provides reusable utilities for building SQL statements with
proper identifier quoting and dialect-specific keyword rendering.
"""

from .core.identifier import join_identifiers, quote_identifier
from .dialects.sqlite import SQLiteDialect

__all__ = [
    "quote_identifier",
    "join_identifiers",
    "SQLiteDialect",
]
