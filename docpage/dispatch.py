"""Main-loop dispatch for completions produced on worker threads.

Worker threads only ``schedule`` callables; the coordinator loop runs them
via ``run_pending``/``wait`` so all shared-state mutation stays on one thread.
"""

from __future__ import annotations

from collections.abc import Callable
from queue import Empty, Queue


class MainLoopDispatcher:
    def __init__(self) -> None:
        self._messages: Queue[Callable[[], None]] = Queue()

    def schedule(self, callback: Callable[[], None]) -> None:
        """Queue ``callback`` to run on the coordinator loop. Thread-safe."""
        self._messages.put(callback)

    def pending(self) -> bool:
        return not self._messages.empty()

    def run_pending(self) -> int:
        """Run every queued callback, including ones queued while draining."""
        ran = 0
        while True:
            try:
                callback = self._messages.get_nowait()
            except Empty:
                return ran
            callback()
            ran += 1

    def wait(self, timeout: float | None = None) -> int:
        """Block until one callback is available, then drain the queue."""
        try:
            callback = self._messages.get(timeout=timeout)
        except Empty:
            return 0
        callback()
        return 1 + self.run_pending()
