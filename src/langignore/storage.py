"""Configuration storages: in-memory and directory-of-YAML-files backends."""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Final, Protocol

import yaml
from pathspec import GitIgnoreSpec

from langignore.filter import DEFAULT_COLLECTION

logger = logging.getLogger(__name__)

FILE_EXTENSION: Final[str] = "yml"

ConfigData = dict[str, Any]


class StorageError(Exception):
    """Raised when stored configuration cannot be read or written."""


class StorageInterface(Protocol):
    """Protocol for configuration storages.

    A storage instance is bound to one collection; ``create_collection``
    returns a view of the same backend bound to another one.
    """

    collection: str

    def exists(self, name: str) -> bool: ...

    def read(self, name: str) -> ConfigData | None: ...

    def read_multiple(self, names: Iterable[str]) -> dict[str, ConfigData]: ...

    def write(self, name: str, data: ConfigData) -> None: ...

    def delete(self, name: str) -> bool: ...

    def ignores(self, name: str) -> bool: ...

    def list_all(self, prefix: str = "") -> list[str]: ...

    def delete_all(self, prefix: str = "") -> bool: ...

    def create_collection(self, collection: str) -> StorageInterface: ...

    def get_all_collection_names(self) -> list[str]: ...


class MemoryStorage:
    """Storage keeping configuration in a process-local dict.

    All collection views created from one instance share the same data.
    """

    def __init__(
        self,
        collection: str = DEFAULT_COLLECTION,
        _data: dict[str, dict[str, ConfigData]] | None = None,
    ) -> None:
        self.collection = collection
        self._data: dict[str, dict[str, ConfigData]] = _data if _data is not None else {}

    def _objects(self) -> dict[str, ConfigData]:
        return self._data.get(self.collection, {})

    def exists(self, name: str) -> bool:
        return name in self._objects()

    def read(self, name: str) -> ConfigData | None:
        data = self._objects().get(name)
        return copy.deepcopy(data) if data is not None else None

    def read_multiple(self, names: Iterable[str]) -> dict[str, ConfigData]:
        objects = self._objects()
        return {name: copy.deepcopy(objects[name]) for name in names if name in objects}

    def write(self, name: str, data: ConfigData) -> None:
        self._data.setdefault(self.collection, {})[name] = copy.deepcopy(data)

    def delete(self, name: str) -> bool:
        objects = self._objects()
        if name not in objects:
            return False
        del objects[name]
        return True

    def ignores(self, name: str) -> bool:
        return False

    def list_all(self, prefix: str = "") -> list[str]:
        return sorted(name for name in self._objects() if name.startswith(prefix))

    def delete_all(self, prefix: str = "") -> bool:
        names = self.list_all(prefix)
        for name in names:
            self.delete(name)
        return bool(names)

    def create_collection(self, collection: str) -> MemoryStorage:
        return MemoryStorage(collection, self._data)

    def get_all_collection_names(self) -> list[str]:
        return sorted(
            collection
            for collection, objects in self._data.items()
            if collection != DEFAULT_COLLECTION and objects
        )


class FileStorage:
    """Storage keeping one ``<name>.yml`` file per configuration object.

    The default collection is the root directory itself. Collection
    ``a.b`` lives in ``<root>/a/b/``.
    """

    def __init__(
        self,
        directory: Path,
        collection: str = DEFAULT_COLLECTION,
        ignore_spec: GitIgnoreSpec | None = None,
    ) -> None:
        """Initialize file storage.

        Args:
            directory: Root directory of the storage.
            collection: Collection this instance reads and writes.
            ignore_spec: Optional gitignore spec; matching files and
                directories are invisible to the storage.
        """
        self.directory = Path(directory)
        self.collection = collection
        self._ignore_spec = ignore_spec

    @classmethod
    def open(cls, directory: Path, respect_gitignore: bool = False) -> FileStorage:
        """Open the default collection of a configuration directory.

        Args:
            directory: Root directory of the storage.
            respect_gitignore: Hide entries matched by ``<directory>/.gitignore``.
                A missing or unreadable ``.gitignore`` hides nothing.

        Returns:
            FileStorage: Storage bound to the default collection.
        """
        directory = Path(directory)
        ignore_spec = None
        if respect_gitignore:
            gitignore_path = directory / ".gitignore"
            try:
                lines = gitignore_path.read_text(encoding="utf-8").splitlines()
            except OSError:
                logger.debug("Cannot read .gitignore: %s", gitignore_path)
            else:
                ignore_spec = GitIgnoreSpec.from_lines(lines)
        return cls(directory, DEFAULT_COLLECTION, ignore_spec)

    @property
    def collection_directory(self) -> Path:
        if self.collection == DEFAULT_COLLECTION:
            return self.directory
        return self.directory.joinpath(*self.collection.split("."))

    def _file_path(self, name: str) -> Path:
        return self.collection_directory / f"{name}.{FILE_EXTENSION}"

    def _is_ignored(self, path: Path, is_dir: bool) -> bool:
        if self._ignore_spec is None:
            return False
        relative = path.relative_to(self.directory).as_posix()
        if is_dir:
            relative += "/"
        return self._ignore_spec.match_file(relative)

    def _config_files(self, directory: Path) -> list[os.DirEntry[str]]:
        """Return visible ``.yml`` file entries of *directory*."""
        suffix = f".{FILE_EXTENSION}"
        try:
            raw_entries = list(os.scandir(directory))
        except FileNotFoundError:
            return []
        except PermissionError:
            logger.debug("Permission denied: %s", directory)
            return []

        files: list[os.DirEntry[str]] = []
        for dir_entry in raw_entries:
            if not dir_entry.name.endswith(suffix):
                continue
            try:
                if not dir_entry.is_file():
                    continue
            except OSError:
                logger.debug("Cannot stat: %s", dir_entry.path)
                continue
            if self._is_ignored(Path(dir_entry.path), is_dir=False):
                continue
            files.append(dir_entry)
        return files

    def exists(self, name: str) -> bool:
        path = self._file_path(name)
        return path.is_file() and not self._is_ignored(path, is_dir=False)

    def read(self, name: str) -> ConfigData | None:
        """Read one configuration object.

        Args:
            name: Configuration object name.

        Returns:
            ConfigData | None: Parsed data, or ``None`` when the object
            does not exist.

        Raises:
            StorageError: If the file cannot be read or does not hold a
                YAML mapping.
        """
        if not self.exists(name):
            return None
        path = self._file_path(name)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError(f"Cannot read '{path}': {exc}") from exc
        except yaml.YAMLError as exc:
            raise StorageError(f"Invalid YAML in '{path}': {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageError(f"'{path}' does not contain a mapping")
        return data

    def read_multiple(self, names: Iterable[str]) -> dict[str, ConfigData]:
        result: dict[str, ConfigData] = {}
        for name in names:
            data = self.read(name)
            if data is not None:
                result[name] = data
        return result

    def ignores(self, name: str) -> bool:
        """Return whether the ignore spec hides object *name* in this collection."""
        return self._is_ignored(self._file_path(name), is_dir=False)

    def write(self, name: str, data: ConfigData) -> None:
        """Write one configuration object.

        Raises:
            StorageError: If the ignore spec hides *name*.
        """
        if self.ignores(name):
            raise StorageError(f"Refusing to write ignored object '{name}'")
        path = self._file_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(
                data, default_flow_style=False, sort_keys=False, allow_unicode=True
            ),
            encoding="utf-8",
        )

    def delete(self, name: str) -> bool:
        if self.ignores(name):
            raise StorageError(f"Refusing to delete ignored object '{name}'")
        if not self.exists(name):
            return False
        self._file_path(name).unlink()
        return True

    def list_all(self, prefix: str = "") -> list[str]:
        suffix_len = len(FILE_EXTENSION) + 1
        names = (entry.name[:-suffix_len] for entry in self._config_files(self.collection_directory))
        return sorted(name for name in names if name.startswith(prefix))

    def delete_all(self, prefix: str = "") -> bool:
        names = self.list_all(prefix)
        for name in names:
            self.delete(name)
        return bool(names)

    def create_collection(self, collection: str) -> FileStorage:
        return FileStorage(self.directory, collection, self._ignore_spec)

    def get_all_collection_names(self) -> list[str]:
        """Return the sorted names of non-empty collections under the root.

        Subdirectories are walked with an explicit stack. Hidden, ignored
        and dotted directories (whose name cannot be told apart from a nested
        collection) are skipped; a directory is a collection only
        when it directly holds configuration files.
        """
        if not self.directory.is_dir():
            return []

        collections: list[str] = []

        # Stack items: (directory_path, collection_name)
        stack: list[tuple[Path, str]] = [(self.directory, DEFAULT_COLLECTION)]

        while stack:
            current_dir, current_collection = stack.pop()

            try:
                raw_entries = list(os.scandir(current_dir))
            except PermissionError:
                logger.debug("Permission denied: %s", current_dir)
                continue

            for dir_entry in raw_entries:
                name = dir_entry.name
                if name.startswith("."):
                    continue
                try:
                    is_dir = dir_entry.is_dir(follow_symlinks=False)
                except OSError:
                    logger.debug("Cannot stat: %s", dir_entry.path)
                    continue
                if not is_dir or self._is_ignored(Path(dir_entry.path), is_dir=True):
                    continue
                if "." in name:
                    # would not map back to this directory
                    logger.debug("Skipping directory with dot in name: %s", dir_entry.path)
                    continue

                child_path = Path(dir_entry.path)
                child_collection = f"{current_collection}.{name}" if current_collection else name
                if self._config_files(child_path):
                    collections.append(child_collection)
                stack.append((child_path, child_collection))

        return sorted(collections)

    def __repr__(self) -> str:
        return f"FileStorage({str(self.directory)!r}, collection={self.collection!r})"
