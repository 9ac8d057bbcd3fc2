"""Export and import of configuration between active and sync storages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from langignore.comparer import StorageComparer
from langignore.filter import CollectionNameFilter
from langignore.storage import StorageInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of an export or import.

    Attributes:
        comparer: Comparer holding the change lists that were applied.
        created: Number of objects written that did not exist in the target.
        updated: Number of objects overwritten in the target.
        deleted: Number of objects removed from the target.
    """

    comparer: StorageComparer
    created: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated or self.deleted)


def _apply(comparer: StorageComparer, dry_run: bool) -> SyncResult:
    """Apply every change list of *comparer* to its target storage.

    Args:
        comparer: Comparer with change lists already built.
        dry_run: When ``True``, count changes without writing anything.

    Returns:
        SyncResult: Applied (or, for a dry run, pending) change counts.
    """
    created = updated = deleted = 0
    for collection in comparer.collections:
        changes = comparer.get_change_list(collection=collection)
        if not changes:
            continue
        source = comparer.source_storage(collection)
        target = comparer.target_storage(collection)

        if not dry_run:
            for name, data in source.read_multiple(changes.create + changes.update).items():
                target.write(name, data)
                logger.debug("Wrote %s in collection '%s'", name, collection)
            for name in changes.delete:
                target.delete(name)
                logger.debug("Deleted %s in collection '%s'", name, collection)

        created += len(changes.create)
        updated += len(changes.update)
        deleted += len(changes.delete)

    return SyncResult(comparer=comparer, created=created, updated=updated, deleted=deleted)


def export_config(
    active: StorageInterface,
    sync: StorageInterface,
    collection_filter: CollectionNameFilter | None = None,
    dry_run: bool = False,
) -> SyncResult:
    """Copy active configuration into the sync storage.

    Collections removed by *collection_filter* are left untouched in *sync*.

    Args:
        active: Active configuration storage (source).
        sync: Sync storage (target).
        collection_filter: Optional collection filter; ``None`` uses the
            built-in patterns.
        dry_run: Compute the result without writing.

    Returns:
        SyncResult: Counts of exported changes.
    """
    comparer = StorageComparer(active, sync, collection_filter).create_change_list()
    result = _apply(comparer, dry_run)
    logger.info(
        "Export%s: %d created, %d updated, %d deleted",
        " (dry run)" if dry_run else "",
        result.created,
        result.updated,
        result.deleted,
    )
    return result


def import_config(
    sync: StorageInterface,
    active: StorageInterface,
    collection_filter: CollectionNameFilter | None = None,
    dry_run: bool = False,
) -> SyncResult:
    """Copy sync configuration into the active storage.

    Collections removed by *collection_filter* are left untouched in *active*.

    Args:
        sync: Sync storage (source).
        active: Active configuration storage (target).
        collection_filter: Optional collection filter; ``None`` uses the
            built-in patterns.
        dry_run: Compute the result without writing.

    Returns:
        SyncResult: Counts of imported changes.
    """
    comparer = StorageComparer(sync, active, collection_filter).create_change_list()
    result = _apply(comparer, dry_run)
    logger.info(
        "Import%s: %d created, %d updated, %d deleted",
        " (dry run)" if dry_run else "",
        result.created,
        result.updated,
        result.deleted,
    )
    return result
