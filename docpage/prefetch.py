"""Eager background lookups for the top entries of a disambiguation list."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from .adapters import BackendAdapter, DocOption
from .cache import DocCache
from .commands import JobResult
from .runner import CommandRunner

logger = logging.getLogger(__name__)

DEFAULT_MAX_PREFETCH_OPTIONS = 10

ReadyCallback = Callable[[DocOption], None]


class Prefetcher:
    """Warm the cache for likely follow-up selections.

    Options are taken in list order; prefetches share the scheduler's job
    slots with interactive lookups.
    """

    def __init__(
        self,
        runner: CommandRunner,
        cache: DocCache,
        max_prefetch_options: int = DEFAULT_MAX_PREFETCH_OPTIONS,
        enabled: bool = True,
    ) -> None:
        self.runner = runner
        self.cache = cache
        self.max_prefetch_options = max(0, max_prefetch_options)
        self.enabled = enabled

    def prefetch(
        self,
        adapter: BackendAdapter,
        query: str,
        options: Sequence[DocOption],
        width: int,
        on_each_ready: ReadyCallback | None = None,
    ) -> int:
        """Issue lookups for uncached top options and return how many were issued."""
        if not self.enabled or not options:
            return 0

        issued = 0
        for option in options[: min(self.max_prefetch_options, len(options))]:
            key = self.runner.cache_key(adapter, query, option.num, width)
            if key in self.cache:
                if on_each_ready is not None:
                    on_each_ready(option)
                continue

            def on_result(_result: JobResult, option: DocOption = option) -> None:
                if on_each_ready is not None:
                    on_each_ready(option)

            self.runner.run_async(adapter, query, option.num, width, on_result)
            issued += 1

        logger.debug("prefetch %r: issued %d lookup(s)", query, issued)
        return issued
