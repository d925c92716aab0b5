"""
musicdb - Entry Point

Run with: python -m musicdb
"""

import argparse
import logging
import sys
from pathlib import Path

from musicdb import __version__
from musicdb.config import reload_config
from musicdb.core import CoreError
from musicdb.core.database import MusicDatabase
from musicdb.core.secondary import Comparator, SearchField

logger = logging.getLogger("musicdb")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("mutagen").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="musicdb",
        description="musicdb - keep, search and merge tab-delimited song lists",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML config file (default: packaged defaults)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print the songs in a file")
    show.add_argument("file", type=Path)
    show.add_argument(
        "--sort",
        choices=[c.value for c in Comparator],
        default=None,
        help="Sort before printing",
    )

    find = sub.add_parser("find", help="Print songs whose field matches a value")
    find.add_argument("file", type=Path)
    find.add_argument("--field", choices=[f.value for f in SearchField], required=True)
    find.add_argument("value")

    merge = sub.add_parser("merge", help="Merge files without duplicates into OUT")
    merge.add_argument("out", type=Path)
    merge.add_argument("files", type=Path, nargs="+")

    split = sub.add_parser("split", help="Move matching songs from FILE into another file")
    split.add_argument("file", type=Path)
    split.add_argument("--field", choices=[f.value for f in SearchField], required=True)
    split.add_argument("value")
    split.add_argument("--out", type=Path, required=True, help="File receiving the matches")

    scan = sub.add_parser("scan", help="Read audio tags under DIR into a song file")
    scan.add_argument("dir", type=Path)
    scan.add_argument("--out", type=Path, required=True)

    return parser.parse_args(argv)


def run_command(args: argparse.Namespace) -> None:
    """Execute the selected subcommand."""
    if args.command == "show":
        db = MusicDatabase.from_file(args.file)
        if args.sort:
            db.sort(Comparator(args.sort))
        sys.stdout.write(str(db))

    elif args.command == "find":
        db = MusicDatabase.from_file(args.file)
        db.print_songs(db.get_entries(SearchField(args.field), args.value))

    elif args.command == "merge":
        merged = MusicDatabase()
        for path in args.files:
            merged.append(MusicDatabase.from_file(path))
        count = merged.write_to_file(args.out)
        logger.info("Merged %d files into %s (%d songs)", len(args.files), args.out, count)

    elif args.command == "split":
        db = MusicDatabase.from_file(args.file)
        matches = db.split(SearchField(args.field), args.value)
        matches.write_to_file(args.out)
        db.write_to_file(args.file)
        logger.info("Moved %d songs from %s to %s", matches.size(), args.file, args.out)

    elif args.command == "scan":
        db = MusicDatabase()
        db.import_folder(args.dir)
        db.write_to_file(args.out)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        reload_config(args.config)
        run_command(args)
    except CoreError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
