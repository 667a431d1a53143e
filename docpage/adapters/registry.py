"""Domain-key to adapter resolution.

Pure configuration lookup: a filetype may name a base adapter and carry field
overrides, and anything unmapped falls back to the default adapter.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping

from ..errors import ConfigurationError
from .output import OPTION_PARSERS, OUTPUT_PROCESSORS
from .types import BackendAdapter, DomainAdapterConfig

_ADAPTER_FIELDS = frozenset(field.name for field in dataclasses.fields(BackendAdapter))


def apply_adapter_overrides(base: BackendAdapter, overrides: Mapping[str, object]) -> BackendAdapter:
    """Return ``base`` with ``overrides`` merged on top.

    ``env`` merges key-by-key; other fields replace.  Post-processors and
    option parsers may be given by table name.
    """
    if not overrides:
        return base
    changes: dict[str, object] = {}
    for key, value in overrides.items():
        if key not in _ADAPTER_FIELDS or key == "name":
            raise ConfigurationError(f"Unknown adapter field {key!r} for adapter {base.name!r}")
        if key == "env":
            if not isinstance(value, Mapping):
                raise ConfigurationError(f"Adapter {base.name!r}: env must be a mapping")
            changes["env"] = {**base.env, **{str(k): str(v) for k, v in value.items()}}
        elif key == "process_output":
            changes[key] = _lookup_named(OUTPUT_PROCESSORS, value, "output processor", base.name)
        elif key == "parse_options":
            changes[key] = None if value is None else _lookup_named(OPTION_PARSERS, value, "option parser", base.name)
        elif key == "error_patterns":
            if isinstance(value, str) or not isinstance(value, (list, tuple)):
                raise ConfigurationError(f"Adapter {base.name!r}: error_patterns must be a list")
            changes[key] = tuple(str(item) for item in value)
        else:
            changes[key] = value
    return dataclasses.replace(base, **changes)


def _lookup_named(table: Mapping[str, object], value: object, kind: str, adapter_name: str):
    if callable(value):
        return value
    if isinstance(value, str) and value in table:
        return table[value]
    raise ConfigurationError(f"Adapter {adapter_name!r}: unknown {kind} {value!r}")


class AdapterRegistry:
    """Static mapping from domain key to ``BackendAdapter``."""

    def __init__(
        self,
        adapters: Mapping[str, BackendAdapter],
        domain_adapters: Mapping[str, DomainAdapterConfig] | None = None,
        default_adapter: str = "man",
    ) -> None:
        self._adapters = dict(adapters)
        self._domain_adapters = dict(domain_adapters or {})
        self.default_adapter = default_adapter

    def adapter_names(self) -> list[str]:
        return sorted(self._adapters)

    def get(self, name: str) -> BackendAdapter:
        """Return the named base adapter or raise ``ConfigurationError``."""
        try:
            return self._adapters[name]
        except KeyError:
            raise ConfigurationError(f"Unknown adapter: {name!r}") from None

    def resolve(self, domain_key: str | None = None) -> BackendAdapter:
        """Resolve a domain key (e.g. a filetype) to its effective adapter."""
        domain = self._domain_adapters.get(domain_key) if domain_key else None
        if domain is None:
            return self.get(self.default_adapter)
        return apply_adapter_overrides(self.get(domain.adapter), domain.overrides)
