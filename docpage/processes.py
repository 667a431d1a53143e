"""Short-lived shell subprocesses with merged stdout/stderr capture.

``spawn`` is non-blocking: a daemon thread waits for the process and reports
``(exit_code, output)`` through ``on_exit`` from that thread, so callers must
hop back onto their own loop before touching shared state.  Creation failures
surface as ``OSError`` from ``spawn``/``run``.
"""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from collections.abc import Callable
from typing import Protocol

ExitCallback = Callable[[int, str], None]


class ProcessHandle(Protocol):
    pid: int | None

    def close(self) -> None: ...

    def is_closing(self) -> bool: ...


class ProcessSpawner(Protocol):
    def spawn(self, command: str, on_exit: ExitCallback) -> ProcessHandle: ...

    def run(self, command: str) -> tuple[int, str]: ...


class SubprocessHandle:
    """Handle for one ``sh -c`` process group; ``close`` kills the group."""

    def __init__(self, proc: subprocess.Popen[str]) -> None:
        self._proc = proc
        self._closing = False

    @property
    def pid(self) -> int | None:
        return self._proc.pid

    def is_closing(self) -> bool:
        return self._closing or self._proc.poll() is not None

    def close(self) -> None:
        if self.is_closing():
            return
        self._closing = True
        try:
            os.killpg(self._proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            # Already gone between poll() and kill.
            pass


class SubprocessSpawner:
    def __init__(self, shell: str = "sh") -> None:
        self.shell = shell

    def _popen(self, command: str) -> subprocess.Popen[str]:
        return subprocess.Popen(
            [self.shell, "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )

    def spawn(self, command: str, on_exit: ExitCallback) -> SubprocessHandle:
        proc = self._popen(command)
        worker = threading.Thread(
            target=self._wait,
            args=(proc, on_exit),
            name=f"docpage-job-{proc.pid}",
            daemon=True,
        )
        worker.start()
        return SubprocessHandle(proc)

    @staticmethod
    def _wait(proc: subprocess.Popen[str], on_exit: ExitCallback) -> None:
        output, _unused = proc.communicate()
        on_exit(proc.returncode, output or "")

    def run(self, command: str) -> tuple[int, str]:
        """Run ``command`` to completion, blocking the caller."""
        proc = self._popen(command)
        output, _unused = proc.communicate()
        return proc.returncode, output or ""
