"""Built-in adapter table and default filetype-to-adapter mapping."""

from __future__ import annotations

from .output import parse_numbered_options, split_output_lines, strip_overstrike, strip_selection_prompt
from .types import BackendAdapter, DomainAdapterConfig

DEFAULT_ADAPTER_NAME = "man"

BUILTIN_ADAPTERS: dict[str, BackendAdapter] = {
    "cppman": BackendAdapter(
        name="cppman",
        cmd="cppman",
        args="--force-columns={width}",
        process_output=strip_selection_prompt,
        error_patterns=("No manual entry for", "error:"),
        exit_code_error=True,
        fallback_to_lsp=True,
        supports_selections=True,
        parse_options=parse_numbered_options,
        filetype="cpp",
    ),
    "man": BackendAdapter(
        name="man",
        cmd="man",
        env={"MANWIDTH": "{width}", "MANPAGER": "cat"},
        process_output=strip_overstrike,
        error_patterns=("No manual entry for",),
        exit_code_error=True,
        fallback_to_lsp=True,
    ),
    "pydoc": BackendAdapter(
        name="pydoc",
        cmd="python3 -m pydoc",
        env={"COLUMNS": "{width}", "PAGER": "cat"},
        process_output=split_output_lines,
        error_patterns=("No Python documentation found for",),
        exit_code_error=False,
        fallback_to_lsp=True,
        filetype="python",
    ),
}

BUILTIN_FILETYPE_ADAPTERS: dict[str, DomainAdapterConfig] = {
    "c": DomainAdapterConfig(adapter="man"),
    "cpp": DomainAdapterConfig(adapter="cppman"),
    "python": DomainAdapterConfig(adapter="pydoc"),
    "sh": DomainAdapterConfig(adapter="man"),
}
