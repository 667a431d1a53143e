"""Lookup-and-navigation engine.

``NavigationEngine`` turns a query into a display request: it resolves the
adapter, discovers options, chooses between content, a disambiguation list
and not-found handling, drives prefetching, and maintains back/forward
history.  Rendering, hover and notifications are host capabilities passed in
at construction time.

All engine state is mutated on the coordinator loop; asynchronous results
arrive through the ``MainLoopDispatcher`` owned by the ``EngineContext``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from .adapters import AdapterRegistry, BackendAdapter, DocOption
from .cache import DocCache
from .commands import JobResult
from .config import HISTORY_UNIFIED, DocPageConfig
from .dispatch import MainLoopDispatcher
from .errors import SpawnError
from .history import HistoryEntry, HistoryStack
from .jobs import JobScheduler
from .options import NotFound, OptionParser
from .prefetch import Prefetcher
from .processes import ProcessSpawner, SubprocessSpawner
from .runner import CommandRunner

logger = logging.getLogger(__name__)

VIEW_CONTENT = "content"
VIEW_SELECTION = "selection"
VIEW_LOADING = "loading"

NO_CONTENT_LINES = ("No content available", "Press b to go back")


@dataclass(frozen=True)
class ViewportSize:
    max_width: int
    max_height: int
    min_height: int


SELECTION_VIEWPORT = ViewportSize(max_width=60, max_height=20, min_height=5)


@dataclass(frozen=True)
class DisplayRequest:
    """Everything a renderer needs to show one view."""

    kind: str
    title: str
    lines: tuple[str, ...]
    size: ViewportSize
    position: str = "cursor"
    filetype: str | None = None
    options: tuple[DocOption, ...] = ()


class Renderer(Protocol):
    def display(self, request: DisplayRequest) -> object: ...

    def close(self) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str, level: str = "info") -> None: ...


HoverFallback = Callable[[], None]


@dataclass
class NavigationState:
    """Current location and view of one lookup session."""

    current_page: str | None = None
    current_selection: int | None = None
    adapter: BackendAdapter | None = None
    view: str | None = None
    options: tuple[DocOption, ...] = ()
    loading: bool = False
    view_serial: int = 0
    display_handle: object | None = None

    def entry(self) -> HistoryEntry | None:
        if self.current_page is None:
            return None
        return HistoryEntry(self.current_page, self.current_selection)

    def reset(self) -> None:
        self.current_page = None
        self.current_selection = None
        self.adapter = None
        self.view = None
        self.options = ()
        self.loading = False
        self.display_handle = None


@dataclass
class EngineContext:
    """Process-wide collaborators shared by every lookup session."""

    config: DocPageConfig
    registry: AdapterRegistry
    cache: DocCache
    dispatcher: MainLoopDispatcher
    scheduler: JobScheduler
    runner: CommandRunner
    option_parser: OptionParser
    prefetcher: Prefetcher
    history: HistoryStack = field(default_factory=HistoryStack)

    @classmethod
    def create(cls, config: DocPageConfig, spawner: ProcessSpawner | None = None) -> EngineContext:
        spawner = spawner or SubprocessSpawner()
        cache = DocCache()
        dispatcher = MainLoopDispatcher()
        scheduler = JobScheduler(spawner, dispatcher, cache, config.max_async_jobs)
        runner = CommandRunner(cache, spawner, scheduler, dispatcher)
        return cls(
            config=config,
            registry=config.build_registry(),
            cache=cache,
            dispatcher=dispatcher,
            scheduler=scheduler,
            runner=runner,
            option_parser=OptionParser(cache, runner, spawner),
            prefetcher=Prefetcher(runner, cache, config.max_prefetch_options, enabled=config.enable_async),
        )


class NavigationEngine:
    def __init__(
        self,
        context: EngineContext,
        renderer: Renderer,
        notifier: Notifier,
        hover_fallback: HoverFallback | None = None,
        columns: Callable[[], int] | None = None,
    ) -> None:
        self.context = context
        self.config = context.config
        self.history = context.history
        self.renderer = renderer
        self.notifier = notifier
        self.hover_fallback = hover_fallback
        self._columns = columns or (lambda: self.config.max_width)
        self.state = NavigationState()

    # Public operations

    def content_width(self) -> int:
        return self.config.content_width(self._columns())

    def open(self, query: str, domain_key: str | None = None, adapter_name: str | None = None) -> None:
        """Start a fresh top-level lookup, discarding history and pending jobs.

        Raises ``ConfigurationError`` if the adapter cannot be resolved.
        """
        query = query.strip()
        if not query:
            self.notifier.notify("Nothing to look up", "warn")
            return
        self.context.scheduler.cleanup()
        self.history.clear()
        self.state.reset()
        registry = self.context.registry
        self.state.adapter = registry.get(adapter_name) if adapter_name else registry.resolve(domain_key)
        self._lookup(query)

    def follow(self, word: str) -> None:
        """Navigate to a cross-reference from the displayed content."""
        word = word.strip()
        if not word:
            return
        if self.state.adapter is None:
            self.open(word)
            return
        current = self.state.entry()
        if current is not None:
            self.history.record(current)
        self._lookup(word)

    def select(self, num: int) -> bool:
        """Choose option ``num`` from the disambiguation list on display."""
        if self.state.view != VIEW_SELECTION or self.state.current_page is None:
            self.notifier.notify("No selection list is open", "warn")
            return False
        if num not in {option.num for option in self.state.options}:
            self.notifier.notify("Invalid selection", "error")
            return False
        if self.config.history_mode == HISTORY_UNIFIED:
            self.history.record(HistoryEntry(self.state.current_page, None))
        self._show_content(self.state.current_page, num)
        return True

    def go_back(self) -> bool:
        target = self.history.go_back(self.state.entry())
        if target is None:
            self.notifier.notify("No previous page to go back to", "info")
            return False
        self._visit(target)
        return True

    def go_forward(self) -> bool:
        target = self.history.go_forward(self.state.entry())
        if target is None:
            self.notifier.notify("No forward page available", "info")
            return False
        self._visit(target)
        return True

    def close(self) -> None:
        """Tear down the active display and cancel all outstanding work."""
        self.renderer.close()
        self.context.scheduler.cleanup()
        self.state.view = None
        self.state.loading = False
        self.state.display_handle = None
        self.state.view_serial += 1

    def cleanup(self) -> None:
        self.context.scheduler.cleanup()

    def pump(self, timeout: float | None = None) -> int:
        """Run completions that have arrived, waiting up to ``timeout`` for one."""
        if timeout is None:
            return self.context.dispatcher.run_pending()
        return self.context.dispatcher.wait(timeout)

    def wait_for_content(self, timeout: float = 30.0, poll_seconds: float = 0.05) -> bool:
        """Pump completions until the current view finishes loading."""
        deadline = time.monotonic() + timeout
        self.pump()
        while self.state.loading and time.monotonic() < deadline:
            self.pump(poll_seconds)
        return not self.state.loading

    # Internals

    def _visit(self, entry: HistoryEntry) -> None:
        if entry.selection is not None:
            self._show_content(entry.page, entry.selection)
        else:
            self._lookup(entry.page)

    def _lookup(self, query: str) -> None:
        """Resolve ``query`` with the session adapter without touching history."""
        adapter = self._adapter()
        self.context.scheduler.cleanup()
        self.state.current_page = query
        self.state.current_selection = None
        try:
            outcome = self.context.option_parser.parse(adapter, query)
        except SpawnError as exc:
            self._show_lines(adapter, query, exc.lines())
            return

        if isinstance(outcome, NotFound):
            self._not_found(adapter, outcome)
        elif not outcome:
            self._show_content(query, None)
        elif self.config.auto_select_first_match:
            self._show_content(query, outcome[0].num)
        else:
            self._show_selection(adapter, query, outcome)

    def _adapter(self) -> BackendAdapter:
        if self.state.adapter is None:
            self.state.adapter = self.context.registry.resolve(None)
        return self.state.adapter

    def _not_found(self, adapter: BackendAdapter, outcome: NotFound) -> None:
        self.context.scheduler.cleanup()
        self.renderer.close()
        self.state.view = None
        self.state.loading = False
        self.state.view_serial += 1
        if adapter.fallback_to_lsp and self.hover_fallback is not None:
            logger.info("no %s page for %r; using hover fallback", adapter.name, outcome.query)
            self.hover_fallback()
            return
        self.notifier.notify(f"No {adapter.name} documentation found for {outcome.query!r}", "warn")

    def _next_view(self, kind: str) -> int:
        self.state.view = kind
        self.state.view_serial += 1
        return self.state.view_serial

    def _show_selection(self, adapter: BackendAdapter, query: str, options: Sequence[DocOption]) -> None:
        self._next_view(VIEW_SELECTION)
        self.state.options = tuple(options)
        self.state.loading = False
        self.context.prefetcher.prefetch(adapter, query, options, self.content_width())

        lines = [f"{option.num:2d}. {option.text}" for option in options]
        lines.append("")
        lines.append(f"Enter selection number (1-{len(options)}):")
        self.state.display_handle = self.renderer.display(
            DisplayRequest(
                kind=VIEW_SELECTION,
                title=f"Select {adapter.name} entry",
                lines=tuple(lines),
                size=SELECTION_VIEWPORT,
                position=self.config.position,
                options=tuple(options),
            )
        )

    def _content_viewport(self) -> ViewportSize:
        return ViewportSize(self.config.max_width, self.config.max_height, self.config.min_height)

    def _show_lines(self, adapter: BackendAdapter, page: str, lines: Sequence[str]) -> None:
        self._next_view(VIEW_CONTENT)
        self.state.options = ()
        self.state.loading = False
        self.state.display_handle = self.renderer.display(
            DisplayRequest(
                kind=VIEW_CONTENT,
                title=f"{adapter.name}: {page}",
                lines=tuple(lines),
                size=self._content_viewport(),
                position=self.config.position,
                filetype=adapter.filetype,
            )
        )

    def _show_content(self, page: str, selection: int | None) -> None:
        adapter = self._adapter()
        width = self.content_width()
        self.state.current_page = page
        self.state.current_selection = selection
        serial = self._next_view(VIEW_CONTENT)
        self.state.options = ()
        self.state.loading = True
        self.state.display_handle = self.renderer.display(
            DisplayRequest(
                kind=VIEW_LOADING,
                title=f"{adapter.name}: {page}",
                lines=(f"Loading {adapter.name} content...",),
                size=self._content_viewport(),
                position=self.config.position,
            )
        )

        def on_result(result: JobResult) -> None:
            if serial != self.state.view_serial:
                return
            self._show_lines(adapter, page, self._content_lines(adapter, page, selection, width, result))

        self.context.runner.run(adapter, page, selection, width, on_result, use_async=self.config.enable_async)

    def _content_lines(
        self,
        adapter: BackendAdapter,
        page: str,
        selection: int | None,
        width: int,
        result: JobResult,
    ) -> list[str]:
        if not result.empty:
            return list(result.lines)
        if selection is not None:
            fallback = self.context.cache.get(self.context.runner.cache_key(adapter, page, None, width))
            if fallback is not None:
                return fallback
        return list(NO_CONTENT_LINES)
