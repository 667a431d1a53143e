"""Cache-checked synchronous and asynchronous backend execution."""

from __future__ import annotations

import logging

from .adapters import BackendAdapter
from .cache import CacheKey, DocCache
from .commands import JobResult, build_command, interpret_output, no_output_lines
from .dispatch import MainLoopDispatcher
from .errors import BackendError, SpawnError
from .jobs import JobScheduler, JobState, QueuedRequest, ResultCallback
from .processes import ProcessSpawner

logger = logging.getLogger(__name__)


class CommandRunner:
    def __init__(
        self,
        cache: DocCache,
        spawner: ProcessSpawner,
        scheduler: JobScheduler,
        dispatcher: MainLoopDispatcher,
    ) -> None:
        self.cache = cache
        self.spawner = spawner
        self.scheduler = scheduler
        self.dispatcher = dispatcher

    @staticmethod
    def cache_key(adapter: BackendAdapter, query: str, selection: int | None, width: int) -> CacheKey:
        return CacheKey(adapter.name, query, selection, width)

    def build_command(self, adapter: BackendAdapter, query: str, selection: int | None, width: int) -> str:
        return build_command(adapter, query, selection, width)

    def run_sync(self, adapter: BackendAdapter, query: str, selection: int | None, width: int) -> list[str]:
        """Run the backend to completion and return its processed lines.

        Raises ``BackendError`` or ``SpawnError``.  Empty successful output
        returns the "no output" sentinel, which is never cached.
        """
        key = self.cache_key(adapter, query, selection, width)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        command = self.build_command(adapter, query, selection, width)
        logger.debug("running %s", command)
        try:
            exit_code, output = self.spawner.run(command)
        except OSError as exc:
            logger.warning("failed to run %r: %s", command, exc)
            raise SpawnError(str(exc), adapter=adapter.name, command=command) from exc

        result = interpret_output(adapter, command, exit_code, output)
        if result.error is not None:
            raise result.error
        if result.cacheable:
            self.cache.put(key, list(result.lines))
        return list(result.lines)

    def run_async(
        self,
        adapter: BackendAdapter,
        query: str,
        selection: int | None,
        width: int,
        callback: ResultCallback,
    ) -> JobState:
        """Schedule a lookup; cache hits complete on the next dispatch without a process."""
        cached = self.cache.get(self.cache_key(adapter, query, selection, width))
        if cached is not None:
            self.dispatcher.schedule(lambda: callback(JobResult(lines=tuple(cached))))
            return JobState.COMPLETED
        return self.scheduler.submit(QueuedRequest(adapter, query, selection, width, callback))

    def run(
        self,
        adapter: BackendAdapter,
        query: str,
        selection: int | None,
        width: int,
        callback: ResultCallback,
        *,
        use_async: bool = True,
    ) -> None:
        """Deliver a ``JobResult`` to ``callback`` by whichever path is enabled."""
        if use_async:
            self.run_async(adapter, query, selection, width, callback)
            return
        try:
            lines = self.run_sync(adapter, query, selection, width)
        except (BackendError, SpawnError) as exc:
            callback(JobResult.failure(exc))
            return
        callback(JobResult(lines=tuple(lines), empty=lines == no_output_lines(adapter)))
