"""
cli.py - Command-line interface for the SQLite + SpatiaLite examples
"""

import argparse
import sqlite3
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from spatialite_examples.commands import EXAMPLES
from spatialite_examples.config import DEFAULT_ENCODING, DEFAULT_SHAPEFILE, MEMORY_DB, RunConfig
from spatialite_examples.errors import SpatialiteExampleError, UsageError
from spatialite_examples.utils.logger import get_logger, setup_logger

logger = get_logger()


class _ArgumentParser(argparse.ArgumentParser):
    """Report bad arguments as UsageError instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="spatialite-examples",
        description="SQLite + SpatiaLite examples",
        epilog="""
Examples:
  # Example 1: build a table of points in an in-memory database:
  python -m spatialite_examples -i 1

  # Example 1 against a database file (created if missing):
  python -m spatialite_examples -i 1 -n points.db

  # Example 2: import shp/BR_UF_2022.shp and look up the state of each point:
  python -m spatialite_examples -i 2

  # Example 2, downloading the IBGE shapefile first:
  python -m spatialite_examples -i 2 --fetch-shapefile --srid 4674
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )

    parser.add_argument('-h', '--help', action='store_true', help='Show this help message')
    parser.add_argument('-i', '--example-id', type=int, default=0, help='ID of the example to run (1 or 2)')
    parser.add_argument('-n', '--db-name', default=None, help='Name of the database file (if not provided, in-memory)')

    # Example 2
    parser.add_argument('--shapefile', type=Path, default=DEFAULT_SHAPEFILE, help=f'Shapefile to import, with or without .shp (default: {DEFAULT_SHAPEFILE})')
    parser.add_argument('--encoding', default=DEFAULT_ENCODING, help=f'Charset of the shapefile attributes (default: {DEFAULT_ENCODING})')
    parser.add_argument('--srid', type=int, default=None, help='SRID to pass to ImportSHP (default: let SpatiaLite decide)')
    parser.add_argument('--fetch-shapefile', action='store_true', help='Download and unzip the BR_UF_2022 shapefile if it is missing')

    parser.add_argument('--log-file', default=None, help='Also write the log to this file (rotated every 5000 lines)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose (DEBUG) logging output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Enable quiet mode (WARNING and ERROR only)')
    return parser


def wants_help(argv: List[str]) -> bool:
    """
    True if argparse would read -h/--help anywhere in argv, including
    clustered short flags (-qh) and abbreviated long options (--hel).
    """
    for arg in argv:
        if arg == '--':
            break
        if arg.startswith('--'):
            name = arg.split('=', 1)[0]
            if len(name) >= 3 and '--help'.startswith(name):
                return True
        elif arg.startswith('-') and len(arg) > 1:
            for flag in arg[1:]:
                if flag == 'h':
                    return True
                # -i and -n take the rest of the cluster as their value
                if flag in 'in':
                    break
    return False


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for any error or unknown example ID)
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    # --help wins over everything else on the command line, valid or not
    if wants_help(argv):
        parser.print_help()
        return 0

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 1

    if args.help:
        parser.print_help()
        return 0

    setup_logger(log_file=args.log_file)
    if args.quiet:
        logger.setLevel(30)
    elif args.verbose:
        logger.setLevel(10)
    else:
        logger.setLevel(20)

    runner = EXAMPLES.get(args.example_id)
    if runner is None:
        logger.error(f"Unknown example ID: {args.example_id}")
        return 1

    if args.db_name is None:
        logger.info("Using in-memory database")
    config = RunConfig(
        example_id=args.example_id,
        db_name=args.db_name if args.db_name is not None else MEMORY_DB,
        shapefile=args.shapefile,
        encoding=args.encoding,
        shapefile_srid=args.srid,
        fetch_shapefile=args.fetch_shapefile,
        log_file=args.log_file,
    )

    logger.info(f"Running example {config.example_id}...")
    try:
        runner(config)
    except (SpatialiteExampleError, sqlite3.Error) as e:
        logger.error(str(e))
        if args.verbose:
            traceback.print_exc()
        return 1
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting.")
        sys.exit(130)
