"""Terminal implementations of the engine's host capabilities.

The renderer prints each view as a titled block; there is no window
geometry in a plain terminal, so size and position hints are ignored.
"""

from __future__ import annotations

import shutil
import sys
from typing import TextIO

from .engine import VIEW_CONTENT, VIEW_SELECTION, DisplayRequest
from .highlight import DEFAULT_STYLE, colorize_lines, sanitize_terminal_text

_LEVEL_STYLES = {
    "error": "\033[31m",
    "warn": "\033[33m",
    "info": "\033[36m",
}
_RESET = "\033[0m"


def terminal_columns() -> int:
    return max(1, shutil.get_terminal_size((80, 24)).columns)


class TerminalRenderer:
    def __init__(
        self,
        stream: TextIO | None = None,
        style: str = DEFAULT_STYLE,
        no_color: bool = False,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.style = style
        self.no_color = no_color
        self.displayed = 0
        self.active: DisplayRequest | None = None

    def _rule(self, title: str) -> str:
        width = min(terminal_columns(), 100)
        label = f" {title} "
        return label.center(width, "=") if len(label) < width else label

    def display(self, request: DisplayRequest) -> int:
        lines = [sanitize_terminal_text(line) for line in request.lines]
        if request.kind == VIEW_CONTENT and not self.no_color:
            lines = colorize_lines(lines, request.filetype, self.style)
        elif request.kind == VIEW_SELECTION and not self.no_color:
            lines = [_color_option_row(line) for line in lines]

        self.stream.write(self._rule(request.title) + "\n")
        for line in lines:
            self.stream.write(line + "\n")
        self.stream.flush()
        self.displayed += 1
        self.active = request
        return self.displayed

    def close(self) -> None:
        self.active = None


def _color_option_row(line: str) -> str:
    number, sep, rest = line.partition(". ")
    if not sep or not number.strip().isdigit():
        return line
    return f"\033[33m{number}{_RESET}. \033[36m{rest}{_RESET}"


class TerminalNotifier:
    def __init__(self, stream: TextIO | None = None, no_color: bool = False) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.no_color = no_color

    def notify(self, message: str, level: str = "info") -> None:
        tag = f"[{level}]"
        if not self.no_color and level in _LEVEL_STYLES:
            tag = f"{_LEVEL_STYLES[level]}{tag}{_RESET}"
        self.stream.write(f"{tag} {message}\n")
        self.stream.flush()


class TerminalHoverFallback:
    """Stand-in for an editor hover provider, which a terminal does not have."""

    def __init__(self, notifier: TerminalNotifier) -> None:
        self.notifier = notifier

    def __call__(self) -> None:
        self.notifier.notify("No documentation page found and no hover provider is available", "warn")
