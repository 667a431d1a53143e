"""Line-oriented interactive session driving a ``NavigationEngine``.

Between commands the loop drains completed jobs so the current view is
repainted before the next prompt.
"""

from __future__ import annotations

from collections.abc import Callable

from .engine import VIEW_SELECTION, NavigationEngine

HELP_TEXT = (
    "Commands: N select option N | b back | f forward | k WORD follow reference | "
    "/QUERY new lookup | ? help | q quit"
)

ReadLine = Callable[[str], str]


class LookupSession:
    """Command dispatch for one terminal session."""

    def __init__(
        self,
        engine: NavigationEngine,
        domain_key: str | None = None,
        adapter_name: str | None = None,
        content_timeout: float = 30.0,
    ) -> None:
        self.engine = engine
        self.domain_key = domain_key
        self.adapter_name = adapter_name
        self.content_timeout = content_timeout

    def adapter_label(self) -> str:
        registry = self.engine.context.registry
        adapter = registry.get(self.adapter_name) if self.adapter_name else registry.resolve(self.domain_key)
        return adapter.name

    def prompt(self) -> str:
        if self.engine.state.view == VIEW_SELECTION:
            return "select> "
        return "docpage> "

    def open(self, query: str) -> None:
        self.engine.open(query, domain_key=self.domain_key, adapter_name=self.adapter_name)
        self.settle()

    def settle(self) -> None:
        self.engine.wait_for_content(timeout=self.content_timeout)

    def handle(self, line: str) -> bool:
        """Run one command; return ``False`` when the session should end."""
        command = line.strip()
        if not command:
            self.engine.pump()
            return True
        if command in {"q", "quit"}:
            self.engine.close()
            return False
        if command in {"?", "h", "help"}:
            adapters = ", ".join(self.engine.context.registry.adapter_names())
            self.engine.notifier.notify(f"{HELP_TEXT}\nAdapters: {adapters}", "info")
        elif command == "b":
            self.engine.go_back()
        elif command == "f":
            self.engine.go_forward()
        elif command.isdigit():
            self.engine.select(int(command))
        elif command.startswith("k "):
            self.engine.follow(command[2:])
        elif command.startswith("/"):
            self.engine.open(command[1:], domain_key=self.domain_key, adapter_name=self.adapter_name)
        else:
            self.engine.notifier.notify(f"Unknown command: {command!r} (? for help)", "warn")
            return True
        self.settle()
        return True


def run_session(session: LookupSession, read_line: ReadLine = input, initial_query: str | None = None) -> None:
    """Run commands from ``read_line`` until quit or end of input."""
    query = initial_query
    try:
        if not query:
            query = read_line(f"Search {session.adapter_label()}: ")
        session.open(query)
        while session.handle(read_line(session.prompt())):
            pass
    except (EOFError, KeyboardInterrupt):
        session.engine.close()
