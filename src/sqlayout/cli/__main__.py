"""
Unified CLI entry point for sqlayout.

Usage:
    python -m sqlayout.cli <command> [options]

Available commands:
    compile   - Compile a schema document to SQLite DDL (optionally apply it)
    validate  - Validate a schema document
"""

import argparse
import sys
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="sqlayout.cli",
        description="sqlayout CLI - SQLite DDL from schema documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sqlayout.cli compile schema.xml
  python -m sqlayout.cli compile schema.yml --if-not-exists --transaction
  python -m sqlayout.cli compile schema.yml --execute sqlite:///app.db
  python -m sqlayout.cli validate schema.yml
        """,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )
    subparsers.add_parser(
        "compile",
        help="Compile a schema document to DDL",
        add_help=False,  # Let the delegated module handle help
    )
    subparsers.add_parser(
        "validate",
        help="Validate a schema document",
        add_help=False,
    )

    args, remaining_args = parser.parse_known_args(argv)

    if args.command == "compile":
        from sqlayout.cli.compile import main as compile_main

        return compile_main(remaining_args)

    elif args.command == "validate":
        from sqlayout.cli.compile import validate_main

        return validate_main(remaining_args)

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
