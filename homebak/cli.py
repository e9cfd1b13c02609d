"""
Command-line interface for homebak.

Notes
-----
The CLI is intentionally thin. It parses arguments into an InputData record and
delegates to the engine's mode dispatch.

Modes (exactly one per invocation)
----------------------------------
- -B/--backup: pack inputs (paths, config, tags) into an archive.
- -R/--restore ARCHIVE: restore entries to their original locations.
- -E/--extract ARCHIVE: extract entries below a directory.
- -V/--version: print the version string.
- --list-tags: print the tag registry.
"""

from __future__ import annotations

import argparse
import os

from homebak_engine.config import DEFAULT_CONFIG_FILE_NAME
from homebak_engine.data_models import (
    BackupRequest,
    ExtractRequest,
    InputData,
    InvocationMode,
    RestoreRequest,
)
from homebak_engine.dispatch import run_invocation
from homebak_engine.errors import HomebakError
from homebak_engine.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="homebak",
        description="Back up files, directories and tagged locations into a single archive.",
    )

    mode = parser.add_mutually_exclusive_group(required=False)
    mode.add_argument("-B", "--backup", action="store_true", help="Create a backup archive")
    mode.add_argument(
        "-R",
        "--restore",
        metavar="ARCHIVE",
        default=None,
        help="Restore an archive to its original locations",
    )
    mode.add_argument(
        "-E",
        "--extract",
        metavar="ARCHIVE",
        default=None,
        help="Extract an archive into a directory",
    )
    mode.add_argument("-V", "--version", action="store_true", help="Print the version and exit")
    mode.add_argument("--list-tags", action="store_true", help="List the available tags")

    backup_g = parser.add_argument_group("backup options")
    backup_g.add_argument(
        "-i",
        "--input",
        action="append",
        default=[],
        help="File or directory to back up. Repeatable.",
    )
    backup_g.add_argument(
        "-x",
        "--exclude",
        action="append",
        default=[],
        help="File or directory to leave out (including everything below it). Repeatable.",
    )
    backup_g.add_argument(
        "-t",
        "--tag",
        action="append",
        default=[],
        help="Tag naming a well-known location to back up. Repeatable.",
    )
    backup_g.add_argument("-o", "--output", default=None, help="Archive path to write")
    backup_g.add_argument(
        "-c",
        "--use-config",
        action="store_true",
        help="Also back up the paths and tags listed in the backup config file.",
    )
    backup_g.add_argument(
        "--config-path",
        default=DEFAULT_CONFIG_FILE_NAME,
        help=f"Backup config file (default: ./{DEFAULT_CONFIG_FILE_NAME}).",
    )
    backup_g.add_argument(
        "--dry-run",
        action="store_true",
        help="Build and print the plan without writing the archive.",
    )
    backup_g.add_argument(
        "--max-items",
        type=int,
        default=100,
        help="Maximum number of entries to list in the printed plan (default: 100).",
    )

    extract_g = parser.add_argument_group("extract options")
    extract_g.add_argument(
        "-d",
        "--destination",
        default=None,
        help="Directory to extract into (default: ./<archive name>).",
    )

    log_g = parser.add_argument_group("logging")
    log_g.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    log_g.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def input_data_from_args(args: argparse.Namespace) -> InputData:
    """Convert parsed arguments into the engine's InputData record."""
    backup = BackupRequest(
        input_paths=tuple(args.input),
        exclude_paths=tuple(args.exclude),
        tags=tuple(args.tag),
        output_path=args.output,
        use_config=bool(args.use_config),
        config_path=args.config_path,
        dry_run=bool(args.dry_run),
        max_items=args.max_items,
    )

    if args.backup:
        return InputData(mode=InvocationMode.BACKUP, backup=backup)
    if args.restore is not None:
        return InputData(mode=InvocationMode.RESTORE, restore=RestoreRequest(archive_path=args.restore))
    if args.extract is not None:
        return InputData(
            mode=InvocationMode.EXTRACT,
            extract=ExtractRequest(archive_path=args.extract, destination=args.destination),
        )
    if args.version:
        return InputData(mode=InvocationMode.VERSION)
    if args.list_tags:
        return InputData(mode=InvocationMode.LIST_TAGS)
    return InputData(mode=None, backup=backup)


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        level = "DEBUG"
    elif args.quiet:
        level = "WARNING"
    else:
        level = os.environ.get("HOMEBAK_LOG_LEVEL", "INFO")
    setup_logging(level=level, log_file=os.environ.get("HOMEBAK_LOG_FILE"))

    if args.max_items < 0:
        print("ERROR: --max-items must be non-negative.")
        return 2

    try:
        run_invocation(input_data_from_args(args))
    except HomebakError as exc:
        print(f"ERROR: {exc}")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
