"""Storage comparison restricted to the collections a filter lets through."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, Literal, overload

from langignore.filter import DEFAULT_COLLECTION, CollectionFilter, CollectionNameFilter
from langignore.storage import StorageInterface

logger = logging.getLogger(__name__)

Operation = Literal["create", "update", "delete"]

OPERATIONS: Final[tuple[Operation, ...]] = ("create", "update", "delete")


@dataclass(slots=True)
class ChangeList:
    """Pending changes for one collection.

    Attributes:
        create: Names present in the source only.
        update: Names present in both storages with differing data.
        delete: Names present in the target only.
    """

    create: list[str] = field(default_factory=list)
    update: list[str] = field(default_factory=list)
    delete: list[str] = field(default_factory=list)

    def get(self, operation: Operation) -> list[str]:
        if operation not in OPERATIONS:
            raise ValueError(
                f"Unknown operation '{operation}'. Known operations: {', '.join(OPERATIONS)}"
            )
        return getattr(self, operation)

    def __bool__(self) -> bool:
        return bool(self.create or self.update or self.delete)


class StorageComparer:
    """Compare a source storage against a target storage.

    Collection enumeration goes through a ``CollectionNameFilter``, so
    collections it removes (``language.*`` by default) are never compared.
    """

    def __init__(
        self,
        source: StorageInterface,
        target: StorageInterface,
        collection_filter: CollectionNameFilter | None = None,
    ) -> None:
        """Initialize storage comparer.

        Args:
            source: Storage holding the desired configuration.
            target: Storage the change lists would be applied to.
            collection_filter: Optional collection filter. Defaults to
                ``CollectionFilter()`` with the built-in patterns.
        """
        self._source = source.create_collection(DEFAULT_COLLECTION)
        self._target = target.create_collection(DEFAULT_COLLECTION)
        self._filter: CollectionNameFilter = collection_filter or CollectionFilter()
        self._source_storages: dict[str, StorageInterface] = {}
        self._target_storages: dict[str, StorageInterface] = {}
        self._change_lists: dict[str, ChangeList] = {}

    def source_storage(self, collection: str = DEFAULT_COLLECTION) -> StorageInterface:
        if collection not in self._source_storages:
            self._source_storages[collection] = self._source.create_collection(collection)
        return self._source_storages[collection]

    def target_storage(self, collection: str = DEFAULT_COLLECTION) -> StorageInterface:
        if collection not in self._target_storages:
            self._target_storages[collection] = self._target.create_collection(collection)
        return self._target_storages[collection]

    def get_all_collection_names(self, include_default: bool = True) -> list[str]:
        """Return the filtered union of source and target collection names.

        Args:
            include_default: Whether the default collection must be present.

        Returns:
            list[str]: Collection names, default collection first when
            requested.
        """
        names = list(
            dict.fromkeys(
                [
                    *self._source.get_all_collection_names(),
                    *self._target.get_all_collection_names(),
                ]
            )
        )
        return self._filter.filter_collections(names, include_default)

    def create_change_list(self) -> StorageComparer:
        """Build change lists for every filtered collection.

        Returns:
            StorageComparer: ``self``, for chaining.
        """
        self._change_lists = {}
        for collection in self.get_all_collection_names():
            self._change_lists[collection] = self._compare_collection(collection)
        logger.debug(
            "Compared %d collection(s), %d with changes",
            len(self._change_lists),
            sum(1 for changes in self._change_lists.values() if changes),
        )
        return self

    def _compare_collection(self, collection: str) -> ChangeList:
        source = self.source_storage(collection)
        target = self.target_storage(collection)
        source_names = source.list_all()
        target_names = target.list_all()
        target_set = set(target_names)
        source_set = set(source_names)

        changes = ChangeList(
            create=[
                name
                for name in source_names
                if name not in target_set and not target.ignores(name)
            ],
            delete=[name for name in target_names if name not in source_set],
        )
        shared = [name for name in source_names if name in target_set]
        source_data = source.read_multiple(shared)
        target_data = target.read_multiple(shared)
        changes.update = [
            name for name in shared if source_data.get(name) != target_data.get(name)
        ]
        return changes

    @overload
    def get_change_list(
        self, operation: None = None, collection: str = DEFAULT_COLLECTION
    ) -> ChangeList: ...

    @overload
    def get_change_list(
        self, operation: Operation, collection: str = DEFAULT_COLLECTION
    ) -> list[str]: ...

    def get_change_list(
        self, operation: Operation | None = None, collection: str = DEFAULT_COLLECTION
    ) -> ChangeList | list[str]:
        """Return the change list of one collection.

        Args:
            operation: One of ``create``, ``update``, ``delete``; ``None``
                returns the whole ``ChangeList``.
            collection: Collection name.

        Returns:
            ChangeList | list[str]: Pending changes. An unknown or filtered
            collection has an empty change list.

        Raises:
            ValueError: If ``operation`` is not a known operation.
        """
        changes = self._change_lists.get(collection, ChangeList())
        if operation is None:
            return changes
        return changes.get(operation)

    @property
    def collections(self) -> list[str]:
        """Collections covered by the last ``create_change_list`` call."""
        return list(self._change_lists)

    def has_changes(self) -> bool:
        return any(self._change_lists.values())

    def reset(self) -> StorageComparer:
        self._source_storages.clear()
        self._target_storages.clear()
        return self.create_change_list()
