"""Bounded-concurrency scheduler for asynchronous backend invocations.

At most ``max_async_jobs`` processes run at once; further requests wait in a
FIFO queue.  Process exits are routed through the ``MainLoopDispatcher`` and
handled there: the finished job leaves the running set, the next queued
request is started, and only then is the requester's callback invoked.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .adapters import BackendAdapter
from .cache import CacheKey, DocCache
from .commands import JobResult, build_command, interpret_output
from .dispatch import MainLoopDispatcher
from .errors import SpawnError
from .processes import ProcessHandle, ProcessSpawner

logger = logging.getLogger(__name__)

DEFAULT_MAX_ASYNC_JOBS = 5

ResultCallback = Callable[[JobResult], None]


class JobState(Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class QueuedRequest:
    """One lookup waiting for (or occupying) a job slot."""

    adapter: BackendAdapter
    query: str
    selection: int | None
    width: int
    callback: ResultCallback

    @property
    def cache_key(self) -> CacheKey:
        return CacheKey(self.adapter.name, self.query, self.selection, self.width)


@dataclass(eq=False)
class Job:
    """One in-flight process plus the request it will answer."""

    job_id: int
    request: QueuedRequest
    command: str
    handle: ProcessHandle | None = None
    state: JobState = JobState.RUNNING

    @property
    def pid(self) -> int | None:
        return None if self.handle is None else self.handle.pid


class JobScheduler:
    def __init__(
        self,
        spawner: ProcessSpawner,
        dispatcher: MainLoopDispatcher,
        cache: DocCache,
        max_async_jobs: int = DEFAULT_MAX_ASYNC_JOBS,
    ) -> None:
        self.spawner = spawner
        self.dispatcher = dispatcher
        self.cache = cache
        self.max_async_jobs = max(1, max_async_jobs)
        self.running: list[Job] = []
        self.queue: deque[QueuedRequest] = deque()
        self._next_job_id = 1

    @property
    def idle(self) -> bool:
        return not self.running and not self.queue

    def submit(self, request: QueuedRequest) -> JobState:
        """Start ``request`` now if a slot is free, otherwise queue it."""
        if len(self.running) >= self.max_async_jobs:
            self.queue.append(request)
            logger.debug("queued %s (%d waiting)", request.cache_key, len(self.queue))
            return JobState.QUEUED
        return self._start(request)

    def _start(self, request: QueuedRequest) -> JobState:
        command = build_command(request.adapter, request.query, request.selection, request.width)
        job = Job(job_id=self._next_job_id, request=request, command=command)
        self._next_job_id += 1

        def on_exit(exit_code: int, output: str) -> None:
            # Runs on the spawner's thread; hop onto the main loop first.
            self.dispatcher.schedule(lambda: self._on_exit(job, exit_code, output))

        try:
            job.handle = self.spawner.spawn(command, on_exit)
        except OSError as exc:
            logger.warning("failed to spawn %r: %s", command, exc)
            job.state = JobState.FAILED
            error = SpawnError(str(exc), adapter=request.adapter.name, command=command)
            self.dispatcher.schedule(lambda: request.callback(JobResult.failure(error)))
            return JobState.FAILED

        self.running.append(job)
        logger.debug("started job %d pid=%s: %s", job.job_id, job.pid, command)
        return JobState.RUNNING

    def _promote_queued(self) -> None:
        """Fill free slots from the queue, answering cache hits without a process."""
        while self.queue and len(self.running) < self.max_async_jobs:
            request = self.queue.popleft()
            cached = self.cache.get(request.cache_key)
            if cached is not None:
                result = JobResult(lines=tuple(cached))
                self.dispatcher.schedule(lambda request=request, result=result: request.callback(result))
                continue
            if self._start(request) is JobState.RUNNING:
                return

    def _on_exit(self, job: Job, exit_code: int, output: str) -> None:
        if job not in self.running:
            # Closed by cleanup(); its requester belongs to an older session.
            return
        self.running.remove(job)
        self._promote_queued()

        request = job.request
        result = interpret_output(request.adapter, job.command, exit_code, output)
        job.state = JobState.COMPLETED if result.ok else JobState.FAILED
        logger.debug("job %d exited with code %d (%s)", job.job_id, exit_code, job.state.value)
        if result.cacheable:
            self.cache.put(request.cache_key, list(result.lines))
        request.callback(result)

    def cleanup(self) -> None:
        """Close every running process and drop every queued request."""
        if self.idle:
            return
        closed = 0
        for job in self.running:
            if job.handle is not None and not job.handle.is_closing():
                job.handle.close()
                closed += 1
        logger.debug("cleanup: closed %d job(s), dropped %d queued", closed, len(self.queue))
        self.running.clear()
        self.queue.clear()
