"""Backend adapter records, output processors, and domain resolution."""

from __future__ import annotations

from .builtin import BUILTIN_ADAPTERS, BUILTIN_FILETYPE_ADAPTERS, DEFAULT_ADAPTER_NAME
from .output import (
    OPTION_PARSERS,
    OUTPUT_PROCESSORS,
    SELECTION_PROMPT,
    parse_numbered_options,
    split_output_lines,
    strip_overstrike,
    strip_selection_prompt,
)
from .registry import AdapterRegistry, apply_adapter_overrides
from .types import WIDTH_PLACEHOLDER, BackendAdapter, DocOption, DomainAdapterConfig

__all__ = [
    "AdapterRegistry",
    "BUILTIN_ADAPTERS",
    "BUILTIN_FILETYPE_ADAPTERS",
    "BackendAdapter",
    "DEFAULT_ADAPTER_NAME",
    "DocOption",
    "DomainAdapterConfig",
    "OPTION_PARSERS",
    "OUTPUT_PROCESSORS",
    "SELECTION_PROMPT",
    "WIDTH_PLACEHOLDER",
    "apply_adapter_overrides",
    "parse_numbered_options",
    "split_output_lines",
    "strip_overstrike",
    "strip_selection_prompt",
]
