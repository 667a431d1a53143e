"""Engine configuration: defaults, JSON config file, and validation.

The JSON file is read leniently (missing or malformed files act like an
empty object); values that do parse but are invalid raise
``ConfigurationError`` so bad setups fail at startup.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path

from platformdirs import user_config_dir

from .adapters import (
    BUILTIN_ADAPTERS,
    BUILTIN_FILETYPE_ADAPTERS,
    DEFAULT_ADAPTER_NAME,
    AdapterRegistry,
    BackendAdapter,
    DomainAdapterConfig,
    apply_adapter_overrides,
)
from .errors import ConfigurationError

APP_NAME = "docpage"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

HISTORY_UNIFIED = "unified"
HISTORY_SEPARATE = "separate"
HISTORY_MODES = (HISTORY_UNIFIED, HISTORY_SEPARATE)
POSITIONS = ("cursor", "center")
MIN_CONTENT_WIDTH = 40

_POSITIVE_INT_FIELDS = ("max_width", "max_height", "min_height", "max_async_jobs")
_NONNEGATIVE_INT_FIELDS = ("max_prefetch_options",)
_BOOL_FIELDS = ("enable_async", "auto_select_first_match")


@dataclass
class DocPageConfig:
    max_prefetch_options: int = 10
    max_width: int = 100
    max_height: int = 30
    min_height: int = 5
    enable_async: bool = True
    max_async_jobs: int = 5
    history_mode: str = HISTORY_SEPARATE
    position: str = "cursor"
    auto_select_first_match: bool = False
    default_adapter: str = DEFAULT_ADAPTER_NAME
    adapters: dict[str, BackendAdapter] = field(default_factory=lambda: dict(BUILTIN_ADAPTERS))
    filetype_adapters: dict[str, DomainAdapterConfig] = field(
        default_factory=lambda: dict(BUILTIN_FILETYPE_ADAPTERS)
    )

    def __post_init__(self) -> None:
        for name in _POSITIVE_INT_FIELDS:
            _require_int(name, getattr(self, name), minimum=1)
        for name in _NONNEGATIVE_INT_FIELDS:
            _require_int(name, getattr(self, name), minimum=0)
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be true or false")
        if self.history_mode not in HISTORY_MODES:
            raise ConfigurationError(
                f"history_mode must be one of {', '.join(HISTORY_MODES)}; got {self.history_mode!r}"
            )
        if self.position not in POSITIONS:
            raise ConfigurationError(f"position must be one of {', '.join(POSITIONS)}; got {self.position!r}")

    def content_width(self, columns: int) -> int:
        """Width hint passed to backends for a display ``columns`` wide."""
        return max(MIN_CONTENT_WIDTH, min(self.max_width, columns) - 8)

    def build_registry(self) -> AdapterRegistry:
        """Build the adapter registry, failing fast on dangling adapter names."""
        registry = AdapterRegistry(self.adapters, self.filetype_adapters, self.default_adapter)
        registry.get(self.default_adapter)
        for filetype in sorted(self.filetype_adapters):
            registry.resolve(filetype)
        return registry


def _require_int(name: str, value: object, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigurationError(f"{name} must be an integer >= {minimum}; got {value!r}")


def load_config() -> dict[str, object]:
    """Load the JSON config object, or ``{}`` when missing or malformed."""
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def merge_config_dicts(base: Mapping[str, object], override: Mapping[str, object]) -> dict[str, object]:
    """Deep-merge ``override`` onto ``base``; nested mappings merge key-by-key."""
    merged: dict[str, object] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(current, value)
        else:
            merged[key] = value
    return merged


def _adapters_from_dict(raw: object) -> dict[str, BackendAdapter]:
    adapters = dict(BUILTIN_ADAPTERS)
    if raw is None:
        return adapters
    if not isinstance(raw, Mapping):
        raise ConfigurationError("adapters must be an object keyed by adapter name")
    for name, entry in raw.items():
        if not isinstance(entry, Mapping):
            raise ConfigurationError(f"adapter {name!r} must be an object")
        overrides = {key: value for key, value in entry.items() if key != "name"}
        base = adapters.get(name)
        if base is None:
            cmd = overrides.pop("cmd", None)
            if not isinstance(cmd, str) or not cmd.strip():
                raise ConfigurationError(f"adapter {name!r} needs a cmd")
            base = BackendAdapter(name=name, cmd=cmd)
        adapters[name] = apply_adapter_overrides(base, overrides)
    return adapters


def _filetype_adapters_from_dict(raw: object) -> dict[str, DomainAdapterConfig]:
    domains = dict(BUILTIN_FILETYPE_ADAPTERS)
    if raw is None:
        return domains
    if not isinstance(raw, Mapping):
        raise ConfigurationError("filetype_adapters must be an object keyed by filetype")
    for filetype, entry in raw.items():
        if isinstance(entry, str):
            domains[filetype] = DomainAdapterConfig(adapter=entry)
            continue
        if not isinstance(entry, Mapping) or not isinstance(entry.get("adapter"), str):
            raise ConfigurationError(f"filetype_adapters.{filetype} must name an adapter")
        overrides = {key: value for key, value in entry.items() if key != "adapter"}
        domains[filetype] = DomainAdapterConfig(adapter=entry["adapter"], overrides=overrides)
    return domains


def config_from_dict(data: Mapping[str, object]) -> DocPageConfig:
    """Build a validated ``DocPageConfig``; unknown keys are ignored."""
    scalar_names = {f.name for f in fields(DocPageConfig)} - {"adapters", "filetype_adapters"}
    kwargs: dict[str, object] = {key: value for key, value in data.items() if key in scalar_names}
    kwargs["adapters"] = _adapters_from_dict(data.get("adapters"))
    kwargs["filetype_adapters"] = _filetype_adapters_from_dict(data.get("filetype_adapters"))
    return DocPageConfig(**kwargs)  # type: ignore[arg-type]


def load_docpage_config(overrides: Mapping[str, object] | None = None) -> DocPageConfig:
    """Merge the config file and ``overrides`` onto the defaults."""
    return config_from_dict(merge_config_dicts(load_config(), overrides or {}))
