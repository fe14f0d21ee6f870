"""Configuration management for sqlayout.

Usage:
    >>> from sqlayout.config import get_settings
    >>> settings = get_settings()
    >>> settings.quote_identifiers
    True
"""

from sqlayout.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
