"""Core SQL utilities package."""

from .identifier import join_identifiers, quote_identifier

__all__ = [
    "quote_identifier",
    "join_identifiers",
]
