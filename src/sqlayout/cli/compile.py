"""
Compile and validate commands.

Usage:
    # Print DDL for a document
    python -m sqlayout.cli compile schema.xml

    # Guarded, transactional script written to a file
    python -m sqlayout.cli compile schema.yml --if-not-exists --transaction --output schema.sql

    # Apply directly to a SQLite database
    python -m sqlayout.cli compile schema.yml --execute sqlite:///app.db

    # Validate only
    python -m sqlayout.cli validate schema.yml

Exit codes: 0 success, 1 document or schema error, 2 database apply failure.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from sqlayout.config import get_settings
from sqlayout.infrastructure.schema.core import Schema
from sqlayout.infrastructure.schema.ddl_generator import compile_document, render_script
from sqlayout.infrastructure.schema.exceptions import SchemaApplyError, SchemaError
from sqlayout.infrastructure.sql.dialects.sqlite import SQLiteDialect
from sqlayout.io.loader.schema_applier import SchemaApplier
from sqlayout.io.readers.document_reader import load_document
from sqlayout.utils.logging import bind_context

EXIT_OK = 0
EXIT_SCHEMA_ERROR = 1
EXIT_APPLY_ERROR = 2


def _add_document_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("document", help="Schema document (.yml, .yaml or .xml)")


def build_compile_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlayout.cli compile",
        description="Compile a schema document to SQLite DDL",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_document_argument(parser)
    parser.add_argument(
        "--if-not-exists",
        action="store_true",
        help="Emit CREATE ... IF NOT EXISTS guards",
    )
    parser.add_argument(
        "--transaction",
        action="store_true",
        help="Wrap the script in BEGIN/COMMIT",
    )
    parser.add_argument(
        "--no-quote",
        action="store_true",
        help="Emit identifiers without double quotes",
    )
    parser.add_argument(
        "--strict-cycles",
        action="store_true",
        help="Reject foreign key cycles made only of deferrable foreign keys",
    )
    parser.add_argument(
        "--output",
        help="Write the script to this file instead of stdout",
    )
    parser.add_argument(
        "--execute",
        metavar="DATABASE_URL",
        help="Apply the statements to this database (e.g. sqlite:///app.db)",
    )
    return parser


def build_validate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlayout.cli validate",
        description="Validate a schema document without emitting DDL",
    )
    _add_document_argument(parser)
    parser.add_argument(
        "--strict-cycles",
        action="store_true",
        help="Reject foreign key cycles made only of deferrable foreign keys",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the compile command.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    args = build_compile_parser().parse_args(argv)
    settings = get_settings()
    logger = bind_context(command="compile", document=args.document)

    dialect = SQLiteDialect(quote_identifiers=settings.quote_identifiers and not args.no_quote)
    try:
        document = load_document(args.document)
        statements = compile_document(
            document,
            if_not_exists=args.if_not_exists or settings.if_not_exists,
            allow_deferrable_cycles=settings.allow_deferrable_cycles and not args.strict_cycles,
            dialect=dialect,
        )
    except SchemaError as e:
        logger.error("compile.failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SCHEMA_ERROR

    script = render_script(statements, transaction=args.transaction or settings.transaction)
    if args.output:
        Path(args.output).write_text(script + "\n", encoding="utf-8")
        logger.info("compile.written", output=args.output, statements=len(statements))
    elif not args.execute:
        print(script)

    if args.execute:
        applier = None
        try:
            applier = SchemaApplier(args.execute)
            result = applier.apply(statements)
        except SchemaApplyError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_APPLY_ERROR
        finally:
            if applier is not None:
                applier.close()
        print(
            f"Applied {result.statements_executed} statements to {result.database} "
            f"in {result.duration_ms:.1f} ms"
        )
    return EXIT_OK


def validate_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the validate command."""
    args = build_validate_parser().parse_args(argv)
    settings = get_settings()
    logger = bind_context(command="validate", document=args.document)

    try:
        document = load_document(args.document)
        compile_document(
            document,
            allow_deferrable_cycles=settings.allow_deferrable_cycles and not args.strict_cycles,
        )
    except SchemaError as e:
        logger.error("validate.failed", error=str(e), error_type=type(e).__name__)
        print(f"Invalid: {e}", file=sys.stderr)
        return EXIT_SCHEMA_ERROR

    if isinstance(document, Schema):
        print(f"OK: {len(document.tables)} tables, {len(document.views)} views")
    else:
        print(f"OK: {type(document).__name__.lower()} '{document.name}'")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
