"""Terminal colorizing for documentation content.

Uses Pygments with a lexer picked by the adapter's filetype.  Also
neutralizes terminal control bytes so backend output cannot move the cursor
or ring the bell when printed.
"""

from __future__ import annotations

import re

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_FORMATTERS: dict[str, Terminal256Formatter] = {}
_LEXERS: dict[str, Lexer | None] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _normalize_style(style: str) -> str:
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def _lexer_for_filetype(filetype: str) -> Lexer | None:
    if filetype not in _LEXERS:
        try:
            _LEXERS[filetype] = get_lexer_by_name(filetype, stripnl=False, ensurenl=False)
        except ClassNotFound:
            _LEXERS[filetype] = None
    return _LEXERS[filetype]


def colorize_lines(lines: list[str], filetype: str | None, style: str = DEFAULT_STYLE) -> list[str]:
    """Return ``lines`` highlighted for ``filetype``; unknown filetypes pass through."""
    if not lines or not filetype:
        return list(lines)
    lexer = _lexer_for_filetype(filetype)
    if lexer is None:
        return list(lines)

    rendered = pygments_highlight("\n".join(lines), lexer, _formatter_for_style(_normalize_style(style)))
    out = rendered.split("\n")
    if len(out) > len(lines) and out[-1] in {"", "\x1b[39m", "\x1b[0m"}:
        out.pop()
    return out if len(out) == len(lines) else list(lines)
