"""Command-line composition and exit classification shared by both run paths.

``build_command`` produces the literal ``sh -c`` string for one lookup and
``interpret_output`` turns a finished process into a ``JobResult``.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from .adapters import BackendAdapter
from .errors import BackendError, SpawnError

NO_OUTPUT_TEMPLATE = "No output from {adapter}"


def no_output_lines(adapter: BackendAdapter) -> list[str]:
    return [NO_OUTPUT_TEMPLATE.format(adapter=adapter.name)]


def build_command(adapter: BackendAdapter, query: str, selection: int | None, width: int) -> str:
    """Compose env assignments, command, arguments and the quoted query.

    When a selection is given and the adapter supports selections, the number
    is piped into the backend's interactive disambiguation prompt.
    """
    parts = [f"{key}={shlex.quote(value)}" for key, value in adapter.resolved_env(width).items()]
    parts.append(adapter.cmd)
    args = adapter.resolved_args(width).strip()
    if args:
        parts.append(args)
    parts.append(shlex.quote(query))
    command = " ".join(parts)
    if selection is not None and adapter.supports_selections:
        command = f"echo {int(selection)} | {command}"
    return command


@dataclass(frozen=True)
class JobResult:
    """Lines to show for one finished lookup, plus the failure if any."""

    lines: tuple[str, ...]
    error: BackendError | SpawnError | None = None
    empty: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cacheable(self) -> bool:
        return self.error is None and not self.empty

    @classmethod
    def failure(cls, error: BackendError | SpawnError) -> JobResult:
        return cls(lines=tuple(error.lines()), error=error)


def classify_failure(adapter: BackendAdapter, command: str, exit_code: int, output: str) -> BackendError | None:
    """Return the ``BackendError`` a finished process signals, or ``None``."""
    if adapter.exit_code_error and exit_code != 0:
        return BackendError(
            f"{adapter.name} exited with code {exit_code}",
            adapter=adapter.name,
            exit_code=exit_code,
            command=command,
        )
    pattern = adapter.matched_error_pattern(output)
    if pattern is not None:
        return BackendError(
            f"{adapter.name} output matched error pattern {pattern!r}",
            adapter=adapter.name,
            exit_code=exit_code,
            command=command,
            pattern=pattern,
        )
    return None


def interpret_output(adapter: BackendAdapter, command: str, exit_code: int, output: str) -> JobResult:
    """Classify a finished process and post-process its merged output."""
    error = classify_failure(adapter, command, exit_code, output)
    if error is not None:
        return JobResult.failure(error)
    lines = adapter.process_output(output)
    if not lines:
        return JobResult(lines=tuple(no_output_lines(adapter)), empty=True)
    return JobResult(lines=tuple(lines))
