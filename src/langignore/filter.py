"""Collection filtering: fnmatch-based exclusion of configuration collections."""

from __future__ import annotations

from collections.abc import Iterable
from fnmatch import fnmatchcase
from typing import Final, Protocol

DEFAULT_COLLECTION: Final[str] = ""

DEFAULT_EXCLUDE_PATTERNS: Final[tuple[str, ...]] = ("language.*",)


class InvalidPatternError(ValueError):
    """Raised when an exclusion pattern cannot be used."""


class CollectionNameFilter(Protocol):
    """Protocol for collection filtering.

    Keeps comparer logic decoupled from matching strategy.
    """

    def filter_collections(
        self, collections: Iterable[str], include_default: bool = True
    ) -> list[str]: ...


def _has_unterminated_class(pattern: str) -> bool:
    """Return whether *pattern* opens a ``[`` class that never closes.

    Follows fnmatch bracket rules: a leading ``!`` negates and a ``]``
    right after the opening bracket (or the ``!``) is a literal member.
    """
    i, n = 0, len(pattern)
    while i < n:
        char = pattern[i]
        i += 1
        if char != "[":
            continue
        j = i
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] != "]":
            j += 1
        if j >= n:
            return True
        i = j + 1
    return False


def validate_patterns(patterns: Iterable[str]) -> tuple[str, ...]:
    """Validate exclusion patterns once, before any matching.

    Args:
        patterns: Glob pattern list.

    Returns:
        tuple[str, ...]: The validated patterns in their original order.

    Raises:
        InvalidPatternError: If *patterns* is a bare string, or a pattern
            is not a string, is empty, or has an unterminated character class.
    """
    if isinstance(patterns, str):
        raise InvalidPatternError(
            f"Invalid patterns {patterns!r}: expected a list of patterns, not a string"
        )
    validated: list[str] = []
    for pattern in patterns:
        if not isinstance(pattern, str):
            raise InvalidPatternError(
                f"Invalid pattern {pattern!r}: patterns must be strings"
            )
        if not pattern:
            raise InvalidPatternError("Invalid pattern '': patterns must not be empty")
        if _has_unterminated_class(pattern):
            raise InvalidPatternError(
                f"Invalid pattern '{pattern}': unterminated character class"
            )
        validated.append(pattern)
    return tuple(validated)


class CollectionFilter:
    """Filter collection names by fnmatch patterns.

    Matching is case-sensitive and ``*`` crosses the ``.`` delimiter, so
    ``language.*`` excludes ``language.entity.fr`` as well as
    ``language.fr``.
    """

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        """Initialize collection filter.

        Args:
            patterns: Optional fnmatch pattern list. ``None`` selects
                ``DEFAULT_EXCLUDE_PATTERNS``; an empty list excludes nothing.

        Raises:
            InvalidPatternError: If any pattern is invalid.
        """
        if patterns is None:
            patterns = DEFAULT_EXCLUDE_PATTERNS
        self._patterns: tuple[str, ...] = validate_patterns(patterns)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def should_exclude(self, collection: str) -> bool:
        """Return whether a collection should be excluded.

        Args:
            collection: Collection name.

        Returns:
            bool: ``True`` when any configured pattern matches.
        """
        return any(fnmatchcase(collection, pat) for pat in self._patterns)

    def filter_collections(
        self, collections: Iterable[str], include_default: bool = True
    ) -> list[str]:
        """Return the collections that take part in comparison and sync.

        Args:
            collections: Collection names reported by a storage.
            include_default: Whether the default collection must be present.
                It is added first even when a pattern matches it or it was
                missing from *collections*.

        Returns:
            list[str]: Deduplicated collection names, default collection first
            when requested.
        """
        retained = [name for name in collections if not self.should_exclude(name)]
        if include_default:
            retained.insert(0, DEFAULT_COLLECTION)
        return list(dict.fromkeys(retained))

    def __repr__(self) -> str:
        return f"CollectionFilter(patterns={list(self._patterns)!r})"


def filter_collections(
    collections: Iterable[str],
    include_default: bool = True,
    patterns: Iterable[str] | None = None,
) -> list[str]:
    """Filter *collections* with a one-off ``CollectionFilter``.

    Args:
        collections: Collection names reported by a storage.
        include_default: Whether the default collection must be present.
        patterns: Optional pattern list; ``None`` uses the built-in patterns.

    Returns:
        list[str]: Filtered collection names.
    """
    return CollectionFilter(patterns).filter_collections(collections, include_default)
