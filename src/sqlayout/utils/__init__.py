"""
Utility modules for sqlayout.

This package contains helpers shared across layers, currently the
structured logging setup.
"""

from .logging import bind_context, get_logger, redact_url, sanitize_for_logging

__all__ = [
    "get_logger",
    "bind_context",
    "redact_url",
    "sanitize_for_logging",
]
