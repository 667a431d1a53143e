"""Back/forward history of visited documentation entries.

This module intentionally has no UI concerns; the engine decides which
transitions are recorded.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_HISTORY_ENTRIES = 256


@dataclass(frozen=True)
class HistoryEntry:
    """One visited location.

    ``selection`` is ``None`` for a bare-query view, which is re-resolved
    (possibly to a disambiguation list) when revisited.
    """

    page: str
    selection: int | None = None


class HistoryStack:
    """Bounded back/forward stacks; push and pop happen at the tail."""

    def __init__(self, max_entries: int = MAX_HISTORY_ENTRIES) -> None:
        self.max_entries = max(1, max_entries)
        self.back: list[HistoryEntry] = []
        self.forward: list[HistoryEntry] = []

    def _push(self, stack: list[HistoryEntry], entry: HistoryEntry) -> None:
        stack.append(entry)
        overflow = len(stack) - self.max_entries
        if overflow > 0:
            del stack[:overflow]

    def record(self, origin: HistoryEntry) -> None:
        """Push ``origin`` onto the back stack and clear forward history."""
        self._push(self.back, origin)
        self.forward.clear()

    def go_back(self, current: HistoryEntry | None) -> HistoryEntry | None:
        """Pop the back stack, pushing ``current`` onto the forward stack."""
        if not self.back:
            return None
        target = self.back.pop()
        if current is not None:
            self._push(self.forward, current)
        return target

    def go_forward(self, current: HistoryEntry | None) -> HistoryEntry | None:
        """Pop the forward stack, pushing ``current`` onto the back stack."""
        if not self.forward:
            return None
        target = self.forward.pop()
        if current is not None:
            self._push(self.back, current)
        return target

    def clear(self) -> None:
        self.back.clear()
        self.forward.clear()
