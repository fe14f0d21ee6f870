"""
SQLite-specific SQL dialect implementation.

Provides SQLite keyword rendering for schema enumerations and identifier
quoting. Enumerations are rendered from their textual value
(``"set-null"`` -> ``SET NULL``), so this module does not depend on the
schema model.
"""

from enum import Enum
from typing import Iterable

from ..core.identifier import join_identifiers, quote_identifier

_SORT_KEYWORDS = {"ascending": "ASC", "descending": "DESC"}


class SQLiteDialect:
    """SQLite SQL dialect implementation."""

    name = "sqlite"
    statement_separator = ";"

    def __init__(self, quote_identifiers: bool = True):
        """
        Initialize dialect.

        Args:
            quote_identifiers: Double-quote every emitted identifier. When
                False, names are emitted bare.
        """
        self.quote_identifiers = quote_identifiers

    def quote(self, identifier: str) -> str:
        """Quote an identifier using SQLite syntax (double quotes)."""
        if not self.quote_identifiers:
            return identifier
        return quote_identifier(identifier)

    def column_list(self, names: Iterable[str]) -> str:
        return join_identifiers(names, quote=self.quote_identifiers)

    def keyword(self, member: Enum) -> str:
        """Render an enum member as a SQL keyword (``no-action`` -> ``NO ACTION``)."""
        return str(member.value).replace("-", " ").upper()

    def sort_order(self, member: Enum) -> str:
        return _SORT_KEYWORDS[member.value]

    def on_conflict(self, member: Enum) -> str:
        return f"ON CONFLICT {self.keyword(member)}"

    def __repr__(self) -> str:
        return f"SQLiteDialect(quote_identifiers={self.quote_identifiers})"
