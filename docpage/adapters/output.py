"""Output post-processors and option-list parsers for backend adapters.

Both tables are keyed by name so adapters declared in JSON config can refer
to a processor without carrying code.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from .types import DocOption

SELECTION_PROMPT = "Please enter the selection:"

_OPTION_LINE_RE = re.compile(r"^(\d+)\.\s*(.*)$")
_OVERSTRIKE_RE = re.compile(r".\x08")


def split_output_lines(output: str) -> list[str]:
    """Split raw output into lines, dropping blank ones."""
    return [line for line in output.splitlines() if line.strip()]


def strip_selection_prompt(output: str) -> list[str]:
    """Drop the echoed option list and prompt of an interactive selector.

    Everything up to and including the last prompt line is discarded; the
    remainder is the page body the backend printed after reading the answer.
    """
    lines: list[str] = []
    for line in split_output_lines(output):
        if SELECTION_PROMPT in line:
            lines = []
            continue
        lines.append(line)
    return lines


def strip_overstrike(output: str) -> list[str]:
    """Remove nroff bold/underline overstrike sequences (``X\\bX``, ``_\\bX``)."""
    return split_output_lines(_OVERSTRIKE_RE.sub("", output))


def parse_numbered_options(output: str) -> list[DocOption]:
    """Parse ``N. description`` lines into ordered options.

    ``value`` is the first whitespace-delimited token of the description and
    serves as the default navigable identifier for that option.
    """
    options: list[DocOption] = []
    for raw_line in output.splitlines():
        match = _OPTION_LINE_RE.match(raw_line.strip())
        if match is None:
            continue
        text = match.group(2)
        tokens = text.split()
        options.append(
            DocOption(
                num=int(match.group(1)),
                text=text,
                value=tokens[0] if tokens else text,
            )
        )
    return options


OUTPUT_PROCESSORS: dict[str, Callable[[str], list[str]]] = {
    "lines": split_output_lines,
    "strip_selection_prompt": strip_selection_prompt,
    "strip_overstrike": strip_overstrike,
}

OPTION_PARSERS: dict[str, Callable[[str], list[DocOption]]] = {
    "numbered": parse_numbered_options,
}
