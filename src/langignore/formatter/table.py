"""Aligned plain-text rendering of comparer change lists."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from langignore.comparer import OPERATIONS, StorageComparer
from langignore.filter import DEFAULT_COLLECTION

DEFAULT_LABEL = "(default)"

NO_CHANGES = "No differences."

HEADER = ("Collection", "Config", "Operation")


@dataclass(frozen=True, slots=True)
class StatusRow:
    """A single pending change.

    Attributes:
        collection: Collection name, ``""`` for the default collection.
        name: Configuration object name.
        operation: ``create``, ``update`` or ``delete``.
    """

    collection: str
    name: str
    operation: str


@dataclass(frozen=True, slots=True)
class TableOptions:
    """Options for table formatter.

    Attributes:
        header: Whether to print the column header row.
    """

    header: bool = True


def collection_label(collection: str) -> str:
    return DEFAULT_LABEL if collection == DEFAULT_COLLECTION else collection


def status_rows(comparer: StorageComparer) -> list[StatusRow]:
    """Flatten change lists into rows.

    Rows are sorted by collection, then operation in ``create``,
    ``update``, ``delete`` order, then name.

    Args:
        comparer: Comparer with change lists already built.

    Returns:
        list[StatusRow]: One row per pending change.
    """
    rows: list[StatusRow] = []
    for collection in sorted(comparer.collections):
        changes = comparer.get_change_list(collection=collection)
        for operation in OPERATIONS:
            for name in sorted(changes.get(operation)):
                rows.append(StatusRow(collection, name, operation))
    return rows


def format_status(comparer: StorageComparer, options: TableOptions | None = None) -> str:
    """Render pending changes as an aligned three-column table.

    Args:
        comparer: Comparer with change lists already built.
        options: Rendering options. Defaults to ``TableOptions()``.

    Returns:
        str: Table text without trailing newline, or ``NO_CHANGES``.
    """
    opts = options or TableOptions()
    rows = status_rows(comparer)
    if not rows:
        return NO_CHANGES

    lines: list[tuple[str, str, str]] = [
        (collection_label(row.collection), row.name, row.operation) for row in rows
    ]
    if opts.header:
        lines.insert(0, HEADER)

    widths = [max(len(line[i]) for line in lines) for i in range(2)]
    return "\n".join(
        f"{col.ljust(widths[0])}  {name.ljust(widths[1])}  {op}" for col, name, op in lines
    )


def format_collections(collections: Iterable[str]) -> str:
    """Render collection names one per line, labelling the default collection."""
    return "\n".join(collection_label(collection) for collection in collections)
