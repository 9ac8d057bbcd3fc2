"""CLI entry point for langignore — I/O boundary only."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from langignore import LangignoreError
from langignore.filter import DEFAULT_EXCLUDE_PATTERNS, CollectionFilter, InvalidPatternError
from langignore.storage import FileStorage, StorageError
from langignore.sync import SyncResult, export_config, import_config


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-I",
        "--exclude",
        action="append",
        default=[],
        dest="patterns",
        help="Also exclude collections matching pattern (can be specified multiple times)",
    )
    parser.add_argument(
        "--no-builtin",
        action="store_true",
        dest="no_builtin",
        help=f"Do not exclude {', '.join(DEFAULT_EXCLUDE_PATTERNS)} collections",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        help="Hide files matched by each directory's .gitignore",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each applied change",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``langignore`` command.
    """
    parser = argparse.ArgumentParser(
        prog="langignore",
        description="configuration export/import that leaves language collections alone",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    collections = subparsers.add_parser(
        "collections", help="List the collections that take part in sync"
    )
    collections.add_argument("directory", help="Configuration directory")
    collections.add_argument(
        "--no-default",
        action="store_true",
        dest="no_default",
        help="Omit the default collection",
    )
    _add_common_options(collections)

    status = subparsers.add_parser(
        "status", help="Show differences between active and sync configuration"
    )
    status.add_argument("active", help="Active configuration directory")
    status.add_argument("sync", help="Sync configuration directory")
    status.add_argument(
        "--no-header",
        action="store_true",
        dest="no_header",
        help="Omit the table header row",
    )
    status.add_argument(
        "--csv",
        action="store_true",
        dest="csv_mode",
        help="Output as CSV (collection, name, operation)",
    )
    _add_common_options(status)

    export = subparsers.add_parser(
        "export", help="Write active configuration to the sync directory"
    )
    export.add_argument("active", help="Active configuration directory")
    export.add_argument("sync", help="Sync configuration directory (created if missing)")
    export.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Show pending changes without writing",
    )
    _add_common_options(export)

    import_ = subparsers.add_parser(
        "import", help="Write sync configuration to the active directory"
    )
    import_.add_argument("sync", help="Sync configuration directory")
    import_.add_argument("active", help="Active configuration directory")
    import_.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Show pending changes without writing",
    )
    _add_common_options(import_)

    return parser


def run_langignore(argv: list[str] | None = None) -> str:
    """Run langignore with provided CLI args and return formatted output.

    ``collections`` and ``status`` are side-effect free; ``export`` and
    ``import`` write unless ``--dry-run`` is given.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments via ``argparse`` defaults.

    Returns:
        str: Final rendered output.

    Raises:
        LangignoreError: On any user-facing validation or I/O error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_with_args(args)


def _resolve_directory(directory: str, create: bool = False) -> Path:
    """Resolve directory and validate it is a directory.

    Args:
        directory: Directory argument from CLI.
        create: Create the directory when it does not exist.

    Returns:
        Path: Resolved directory path.

    Raises:
        LangignoreError: If directory does not exist or is not a directory.
    """
    path = Path(directory).resolve()
    if create and not path.exists():
        try:
            path.mkdir(parents=True)
        except OSError as exc:
            raise LangignoreError(f"cannot create '{directory}': {exc}") from exc
    if not path.is_dir():
        raise LangignoreError(f"'{directory}' is not a directory")
    return path


def _build_collection_filter(args: argparse.Namespace) -> CollectionFilter:
    """Build the collection filter from CLI options.

    Args:
        args: Parsed CLI namespace.

    Returns:
        CollectionFilter: Filter with built-in and ``-I`` patterns.

    Raises:
        LangignoreError: If a pattern is invalid.
    """
    patterns: list[str] = [] if args.no_builtin else list(DEFAULT_EXCLUDE_PATTERNS)
    patterns.extend(args.patterns)
    try:
        return CollectionFilter(patterns)
    except InvalidPatternError as exc:
        raise LangignoreError(str(exc)) from exc


def _open_storage(args: argparse.Namespace, directory: str, create: bool = False) -> FileStorage:
    return FileStorage.open(_resolve_directory(directory, create), args.gitignore)


def _run_collections(args: argparse.Namespace, collection_filter: CollectionFilter) -> str:
    from langignore.formatter.table import format_collections

    storage = _open_storage(args, args.directory)
    names = collection_filter.filter_collections(
        storage.get_all_collection_names(), include_default=not args.no_default
    )
    return format_collections(names)


def _run_status(args: argparse.Namespace, collection_filter: CollectionFilter) -> str:
    from langignore.comparer import StorageComparer

    active = _open_storage(args, args.active)
    sync = _open_storage(args, args.sync)
    comparer = StorageComparer(active, sync, collection_filter).create_change_list()

    if args.csv_mode:
        from langignore.formatter.csv_ import format_status_csv

        return format_status_csv(comparer)

    from langignore.formatter.table import TableOptions, format_status

    return format_status(comparer, TableOptions(header=not args.no_header))


def _format_sync_result(verb: str, result: SyncResult, dry_run: bool) -> str:
    """Render an export/import outcome.

    Args:
        verb: ``Export`` or ``Import``.
        result: Sync outcome.
        dry_run: Whether nothing was written.

    Returns:
        str: Pending-change table for dry runs, otherwise a summary line.
    """
    from langignore.formatter.table import NO_CHANGES, format_status

    if not result.changed:
        return NO_CHANGES
    if dry_run:
        return format_status(result.comparer)
    return (
        f"{verb} complete: {result.created} created, "
        f"{result.updated} updated, {result.deleted} deleted."
    )


def _run_export(args: argparse.Namespace, collection_filter: CollectionFilter) -> str:
    active = _open_storage(args, args.active)
    sync = _open_storage(args, args.sync, create=not args.dry_run)
    result = export_config(active, sync, collection_filter, dry_run=args.dry_run)
    return _format_sync_result("Export", result, args.dry_run)


def _run_import(args: argparse.Namespace, collection_filter: CollectionFilter) -> str:
    sync = _open_storage(args, args.sync)
    active = _open_storage(args, args.active)
    result = import_config(sync, active, collection_filter, dry_run=args.dry_run)
    return _format_sync_result("Import", result, args.dry_run)


_COMMANDS = {
    "collections": _run_collections,
    "status": _run_status,
    "export": _run_export,
    "import": _run_import,
}


def _run_with_args(args: argparse.Namespace) -> str:
    """Run the selected subcommand for parsed arguments.

    Args:
        args: Parsed CLI namespace.

    Returns:
        str: Rendered output.

    Raises:
        LangignoreError: On any user-facing validation or I/O error.
    """
    collection_filter = _build_collection_filter(args)
    try:
        return _COMMANDS[args.command](args, collection_filter)
    except StorageError as exc:
        raise LangignoreError(str(exc)) from exc
    except OSError as exc:
        raise LangignoreError(f"cannot write configuration: {exc}") from exc


def main() -> None:
    """Run the CLI entry point with process arguments.

    Parses args exactly once and writes output to stdout.
    Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()  # single parse

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        output = _run_with_args(args)
    except LangignoreError as exc:
        sys.stderr.write(f"langignore: {exc}\n")
        sys.exit(1)

    sys.stdout.write(output + "\n")
