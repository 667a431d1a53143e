"""Option discovery: disambiguation lists and existence checks.

Adapters that support numbered selections are run once without a selection
and their output is scanned for ``N. description`` rows.  Other adapters get
a single minimal-width run whose success means the page exists.  Both kinds
of outcome are cached per (adapter, query).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .adapters import BackendAdapter, DocOption, parse_numbered_options
from .cache import DocCache, OptionsKey
from .commands import build_command
from .errors import BackendError, SpawnError
from .processes import ProcessSpawner
from .runner import CommandRunner

logger = logging.getLogger(__name__)

OPTION_DISCOVERY_WIDTH = 40


@dataclass(frozen=True)
class NotFound:
    """No documentation matched ``query``."""

    query: str
    detail: str = ""


class OptionParser:
    def __init__(self, cache: DocCache, runner: CommandRunner, spawner: ProcessSpawner) -> None:
        self.cache = cache
        self.runner = runner
        self.spawner = spawner

    def parse(self, adapter: BackendAdapter, query: str) -> list[DocOption] | NotFound:
        """Return the options for ``query`` (possibly empty) or ``NotFound``.

        An empty list means the query resolves to a single page and no
        disambiguation is needed.  Raises ``SpawnError`` if the backend
        cannot be started.
        """
        key = OptionsKey(adapter.name, query)
        if self.cache.has_outcome(key):
            return self._from_cached(query, self.cache.get_outcome(key))

        if adapter.supports_selections:
            outcome = self._scan_options(adapter, query)
            self.cache.put_outcome(key, outcome if isinstance(outcome, NotFound) else tuple(outcome))
            return outcome

        try:
            self.runner.run_sync(adapter, query, None, OPTION_DISCOVERY_WIDTH)
        except BackendError as exc:
            logger.info("%s: no page for %r (%s)", adapter.name, query, exc)
            self.cache.put_outcome(key, False)
            return NotFound(query, str(exc))
        self.cache.put_outcome(key, True)
        return []

    @staticmethod
    def _from_cached(query: str, cached: object) -> list[DocOption] | NotFound:
        if isinstance(cached, NotFound):
            return cached
        if cached is False:
            return NotFound(query)
        if cached is True:
            return []
        return list(cached)  # type: ignore[call-overload]

    def _scan_options(self, adapter: BackendAdapter, query: str) -> list[DocOption] | NotFound:
        command = build_command(adapter, query, None, OPTION_DISCOVERY_WIDTH)
        try:
            exit_code, output = self.spawner.run(command)
        except OSError as exc:
            raise SpawnError(str(exc), adapter=adapter.name, command=command) from exc

        parse_options = adapter.parse_options or parse_numbered_options
        options = parse_options(output)
        if options:
            return options

        pattern = adapter.matched_error_pattern(output)
        if pattern is not None:
            logger.info("%s: no page for %r (matched %r)", adapter.name, query, pattern)
            return NotFound(query, pattern)
        if adapter.exit_code_error and exit_code != 0:
            logger.info("%s: no page for %r (exit code %d)", adapter.name, query, exit_code)
            return NotFound(query, f"exit code {exit_code}")
        return []
