"""Adapter records: how to invoke and interpret one documentation backend.

Adapters are plain immutable data plus two pure functions.  New backends are
added by inserting a record into the adapter table, never by branching on
backend identity in the engine.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

WIDTH_PLACEHOLDER = "{width}"


@dataclass(frozen=True)
class DocOption:
    """One numbered entry of a disambiguation list."""

    num: int
    text: str
    value: str


def _split_lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.strip()]


@dataclass(frozen=True)
class BackendAdapter:
    """Immutable description of one external documentation command."""

    name: str
    cmd: str
    args: str = ""
    env: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    process_output: Callable[[str], list[str]] = _split_lines
    error_patterns: tuple[str, ...] = ()
    exit_code_error: bool = True
    fallback_to_lsp: bool = False
    supports_selections: bool = False
    parse_options: Callable[[str], list[DocOption]] | None = None
    filetype: str | None = None

    def __post_init__(self) -> None:
        # Freeze containers handed in from config dicts/lists.
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))
        object.__setattr__(self, "error_patterns", tuple(self.error_patterns))

    def resolved_env(self, width: int) -> dict[str, str]:
        """Return env overrides with ``{width}`` placeholders substituted."""
        return {key: value.replace(WIDTH_PLACEHOLDER, str(width)) for key, value in self.env.items()}

    def resolved_args(self, width: int) -> str:
        return self.args.replace(WIDTH_PLACEHOLDER, str(width))

    def matched_error_pattern(self, output: str) -> str | None:
        """Return the first configured error pattern found in ``output``."""
        for pattern in self.error_patterns:
            if pattern and pattern in output:
                return pattern
        return None


@dataclass(frozen=True)
class DomainAdapterConfig:
    """Per-domain (filetype) adapter choice plus field overrides."""

    adapter: str
    overrides: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))
