"""
SQL identifier handling utilities.

SQLite accepts double-quoted identifiers everywhere a name may appear, so
quoting every table, view and column name keeps generated DDL valid even
when a name collides with a keyword (``"order"``, ``"group"``).
"""


def quote_identifier(name: str) -> str:
    """
    Quote a SQL identifier (table, view or column name).

    Args:
        name: The identifier to quote

    Returns:
        Double-quoted identifier with internal double quotes doubled

    Examples:
        >>> quote_identifier("users")
        '"users"'
        >>> quote_identifier("order")
        '"order"'
        >>> quote_identifier('odd"name')
        '"odd""name"'
    """
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def join_identifiers(names, quote: bool = True) -> str:
    """
    Render a parenthesised, comma-separated identifier list.

    Examples:
        >>> join_identifiers(["id", "name"])
        '("id", "name")'
        >>> join_identifiers(["id"], quote=False)
        '(id)'
    """
    rendered = [quote_identifier(n) if quote else n for n in names]
    return f"({', '.join(rendered)})"
