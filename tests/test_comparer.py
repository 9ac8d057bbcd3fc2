"""Tests for langignore.comparer."""

from __future__ import annotations

from pathlib import Path

import pytest

from langignore.comparer import ChangeList, StorageComparer
from langignore.filter import CollectionFilter
from langignore.storage import FileStorage, MemoryStorage


class TestCollectionNames:
    def test_language_collections_excluded(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        comparer = StorageComparer(*memory_pair)
        assert comparer.get_all_collection_names() == ["", "sandbox"]

    def test_without_default(self, memory_pair: tuple[MemoryStorage, MemoryStorage]) -> None:
        comparer = StorageComparer(*memory_pair)
        assert comparer.get_all_collection_names(include_default=False) == ["sandbox"]

    def test_pass_through_filter(self, memory_pair: tuple[MemoryStorage, MemoryStorage]) -> None:
        comparer = StorageComparer(*memory_pair, CollectionFilter([]))
        assert comparer.get_all_collection_names() == [
            "",
            "language.fr",
            "sandbox",
            "language.de",
        ]

    def test_custom_filter_strategy(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        class OnlySandbox:
            def filter_collections(self, collections, include_default=True):
                return [name for name in collections if name == "sandbox"]

        comparer = StorageComparer(*memory_pair, OnlySandbox())
        assert comparer.get_all_collection_names() == ["sandbox"]
        comparer.create_change_list()
        assert comparer.collections == ["sandbox"]


class TestChangeList:
    def test_default_collection_changes(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        comparer = StorageComparer(*memory_pair).create_change_list()
        assert comparer.get_change_list("create") == ["node.type.page"]
        assert comparer.get_change_list("update") == ["system.site"]
        assert comparer.get_change_list("delete") == ["node.type.article"]

    def test_named_collection_changes(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        comparer = StorageComparer(*memory_pair).create_change_list()
        changes = comparer.get_change_list(collection="sandbox")
        assert changes == ChangeList(create=["system.site"])

    def test_excluded_collections_have_no_changes(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        comparer = StorageComparer(*memory_pair).create_change_list()
        assert comparer.collections == ["", "sandbox"]
        assert not comparer.get_change_list(collection="language.fr")
        assert not comparer.get_change_list(collection="language.de")

    def test_identical_storages(self) -> None:
        source = MemoryStorage()
        target = MemoryStorage()
        for storage in (source, target):
            storage.write("system.site", {"name": "Example"})
        comparer = StorageComparer(source, target).create_change_list()
        assert comparer.has_changes() is False

    def test_only_language_differences(self) -> None:
        source = MemoryStorage()
        source.create_collection("language.fr").write("system.site", {"name": "Exemple"})
        comparer = StorageComparer(source, MemoryStorage()).create_change_list()
        assert comparer.has_changes() is False

    def test_has_changes(self, memory_pair: tuple[MemoryStorage, MemoryStorage]) -> None:
        comparer = StorageComparer(*memory_pair)
        assert comparer.has_changes() is False  # nothing compared yet
        assert comparer.create_change_list().has_changes() is True

    def test_unknown_operation_raises(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        comparer = StorageComparer(*memory_pair).create_change_list()
        with pytest.raises(ValueError, match="Unknown operation"):
            comparer.get_change_list("rename")  # type: ignore[call-overload]

    def test_reset_picks_up_new_state(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        source, target = memory_pair
        comparer = StorageComparer(source, target).create_change_list()
        target.write("node.type.page", {"type": "page"})
        comparer.reset()
        assert comparer.get_change_list("create") == []

    def test_bound_collection_storages_are_normalized(
        self, memory_pair: tuple[MemoryStorage, MemoryStorage]
    ) -> None:
        source, target = memory_pair
        comparer = StorageComparer(
            source.create_collection("sandbox"), target.create_collection("sandbox")
        ).create_change_list()
        assert comparer.get_change_list("create") == ["node.type.page"]


class TestFileComparison:
    def test_directories(self, active_dir: Path, sync_dir: Path) -> None:
        comparer = StorageComparer(
            FileStorage(active_dir), FileStorage(sync_dir)
        ).create_change_list()
        assert comparer.collections == ["", "sandbox"]
        assert comparer.get_change_list() == ChangeList(
            create=["node.type.page"],
            update=["system.site"],
            delete=["node.type.article"],
        )
        assert comparer.get_change_list(collection="sandbox") == ChangeList(
            create=["system.site"]
        )

    def test_objects_hidden_in_target_are_not_created(self, tmp_path: Path) -> None:
        source_dir = tmp_path / "active"
        source_dir.mkdir()
        (source_dir / "x.local.yml").write_text("v: active\n")
        (source_dir / "system.site.yml").write_text("name: Example\n")
        target_dir = tmp_path / "sync"
        target_dir.mkdir()
        (target_dir / ".gitignore").write_text("*.local.yml\n")
        comparer = StorageComparer(
            FileStorage.open(source_dir), FileStorage.open(target_dir, respect_gitignore=True)
        ).create_change_list()
        assert comparer.get_change_list("create") == ["system.site"]
