"""Command-line front door for docpage.

Parses CLI options into config overrides, builds the engine, and either runs
an interactive lookup session or prints a single page and exits.
"""

from __future__ import annotations

import argparse
import logging

from .config import HISTORY_MODES, load_docpage_config
from .engine import EngineContext, NavigationEngine
from .errors import ConfigurationError
from .log_utils import setup_logger
from .session import LookupSession, run_session
from .terminal_host import TerminalHoverFallback, TerminalNotifier, TerminalRenderer, terminal_columns

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Look up documentation through external tools such as cppman or man.")
    parser.add_argument("query", nargs="?", default=None, help="Symbol to look up. Prompts when omitted.")
    parser.add_argument("--filetype", "-t", default=None, help="Filetype used to choose the adapter (e.g. cpp, python).")
    parser.add_argument("--adapter", "-a", default=None, help="Adapter name, overriding filetype selection.")
    parser.add_argument("--sync", action="store_true", help="Run backends synchronously (disables prefetch).")
    parser.add_argument("--history-mode", choices=HISTORY_MODES, default=None, help="Navigation history policy.")
    parser.add_argument("--auto-select", action="store_true", help="Open the first match instead of listing options.")
    parser.add_argument("--max-jobs", type=_positive_int, default=None, help="Concurrent backend process limit.")
    parser.add_argument("--width", type=_positive_int, default=None, help="Display width (default: terminal width).")
    parser.add_argument("--style", default="monokai", help="Pygments style name for highlighting.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--print", dest="print_only", action="store_true", help="Print one page and exit.")
    return parser


def config_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.sync:
        overrides["enable_async"] = False
    if args.history_mode is not None:
        overrides["history_mode"] = args.history_mode
    if args.auto_select or args.print_only:
        overrides["auto_select_first_match"] = True
    if args.max_jobs is not None:
        overrides["max_async_jobs"] = args.max_jobs
    return overrides


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run a lookup.

    Configuration problems (bad config file values, unknown adapters) exit
    with the error message before anything is spawned.
    """
    args = build_parser().parse_args(argv)
    setup_logger()

    try:
        config = load_docpage_config(config_overrides(args))
        context = EngineContext.create(config)
        if args.adapter is not None:
            context.registry.get(args.adapter)
    except ConfigurationError as exc:
        logger.error("configuration error: %s", exc)
        raise SystemExit(f"docpage: {exc}") from exc

    notifier = TerminalNotifier(no_color=args.no_color)
    engine = NavigationEngine(
        context,
        TerminalRenderer(style=args.style, no_color=args.no_color),
        notifier,
        hover_fallback=TerminalHoverFallback(notifier),
        columns=(lambda: args.width) if args.width is not None else terminal_columns,
    )
    session = LookupSession(engine, domain_key=args.filetype, adapter_name=args.adapter)

    if args.print_only:
        if not args.query:
            raise SystemExit("docpage: --print needs a query")
        session.open(args.query)
        engine.close()
        return

    run_session(session, initial_query=args.query)


if __name__ == "__main__":
    main()
