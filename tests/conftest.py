"""Shared fixtures for langignore tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from langignore.storage import MemoryStorage


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def active_dir(tmp_path: Path) -> Path:
    """Create an active configuration directory.

    Structure::

        active/
        ├── language/
        │   ├── de/
        │   │   └── system.site.yml
        │   └── fr/
        │       └── system.site.yml
        ├── sandbox/
        │   └── system.site.yml
        ├── node.type.page.yml
        └── system.site.yml
    """
    root = tmp_path / "active"
    _write(root / "system.site.yml", "name: Example\nslogan: ''\n")
    _write(root / "node.type.page.yml", "type: page\nname: Basic page\n")
    _write(root / "sandbox" / "system.site.yml", "name: Sandbox\n")
    _write(root / "language" / "fr" / "system.site.yml", "name: Exemple\n")
    _write(root / "language" / "de" / "system.site.yml", "name: Beispiel\n")
    return root


@pytest.fixture
def sync_dir(tmp_path: Path) -> Path:
    """Create a sync directory that differs from ``active_dir``.

    Structure::

        sync/
        ├── language/
        │   └── fr/
        │       └── system.site.yml   (stale translation)
        ├── node.type.article.yml     (not in active)
        └── system.site.yml           (different name)
    """
    root = tmp_path / "sync"
    _write(root / "system.site.yml", "name: Old example\nslogan: ''\n")
    _write(root / "node.type.article.yml", "type: article\nname: Article\n")
    _write(root / "language" / "fr" / "system.site.yml", "name: Ancien\n")
    return root


@pytest.fixture
def memory_pair() -> tuple[MemoryStorage, MemoryStorage]:
    """Return a (source, target) pair of populated in-memory storages."""
    source = MemoryStorage()
    source.write("system.site", {"name": "Example"})
    source.write("node.type.page", {"type": "page"})
    source.create_collection("sandbox").write("system.site", {"name": "Sandbox"})
    source.create_collection("language.fr").write("system.site", {"name": "Exemple"})

    target = MemoryStorage()
    target.write("system.site", {"name": "Old example"})
    target.write("node.type.article", {"type": "article"})
    target.create_collection("language.de").write("system.site", {"name": "Beispiel"})
    return source, target
