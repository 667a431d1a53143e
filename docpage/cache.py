"""Process-lifetime cache of rendered pages and option-discovery outcomes.

Entries are never invalidated.  Writes are idempotent: storing equal content
for a key that is already populated leaves the cache unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheKey:
    """Identity of one rendering: adapter, query, selection index, width hint."""

    adapter: str
    query: str
    selection: int | None
    width: int

    def __str__(self) -> str:
        return f"{self.adapter}:{self.query}:{self.selection or 0}:{self.width}"


@dataclass(frozen=True)
class OptionsKey:
    """Identity of one option-discovery (or existence) check."""

    adapter: str
    query: str


class DocCache:
    """In-memory page and option-outcome store."""

    def __init__(self) -> None:
        self._pages: dict[CacheKey, tuple[str, ...]] = {}
        self._outcomes: dict[OptionsKey, object] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def get(self, key: CacheKey) -> list[str] | None:
        cached = self._pages.get(key)
        return None if cached is None else list(cached)

    def put(self, key: CacheKey, lines: list[str]) -> None:
        """Store non-empty page lines; empty results are never cached."""
        if not lines:
            return
        self._pages.setdefault(key, tuple(lines))

    def get_outcome(self, key: OptionsKey) -> object | None:
        return self._outcomes.get(key)

    def put_outcome(self, key: OptionsKey, outcome: object) -> None:
        self._outcomes.setdefault(key, outcome)

    def has_outcome(self, key: OptionsKey) -> bool:
        return key in self._outcomes
