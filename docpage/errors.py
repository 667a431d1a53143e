"""Error kinds raised by adapter resolution and backend invocation.

Backend and spawn failures carry their own user-facing rendering so callers
can recover locally by displaying ``lines()`` instead of crashing.
"""

from __future__ import annotations


class DocPageError(Exception):
    """Base class for docpage failures."""


class ConfigurationError(DocPageError):
    """Invalid static configuration, such as an unknown adapter reference."""


class BackendError(DocPageError):
    """Backend ran but signalled failure by exit code or error pattern."""

    def __init__(
        self,
        message: str,
        *,
        adapter: str = "",
        exit_code: int | None = None,
        command: str | None = None,
        pattern: str | None = None,
    ) -> None:
        super().__init__(message)
        self.adapter = adapter
        self.exit_code = exit_code
        self.command = command
        self.pattern = pattern

    def lines(self) -> list[str]:
        if self.pattern is not None:
            return [f"Error from {self.adapter}: matched {self.pattern!r}"]
        out = [f"Error running {self.adapter} (exit code: {self.exit_code})"]
        if self.command:
            out.append(f"Command: {self.command}")
        return out


class SpawnError(DocPageError):
    """Process could not be created at all."""

    def __init__(self, message: str, *, adapter: str = "", command: str | None = None) -> None:
        super().__init__(message)
        self.adapter = adapter
        self.command = command

    def lines(self) -> list[str]:
        return [f"Failed to start {self.adapter} process"]
