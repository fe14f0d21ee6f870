"""Command-line interface for sqlayout."""
