from __future__ import annotations
from typing import Any, Dict, Iterable, Mapping, Optional
from .exceptions import ConfigError


def parse_additional_headers(entries: Optional[Iterable[str]]) -> Dict[str, str]:
    """Turn ``name|value`` strings into a header mapping.

    Only the first ``|`` separates name from value. Entries without a
    separator or with an empty name are rejected.
    """
    headers: Dict[str, str] = {}
    for entry in entries or []:
        if not isinstance(entry, str) or '|' not in entry:
            raise ConfigError(f"Malformed additional header {entry!r}, expected 'name|value'")
        name, value = entry.split('|', 1)
        name = name.strip()
        if not name:
            raise ConfigError(f"Malformed additional header {entry!r}, empty header name")
        headers[name] = value.strip()
    return headers


def merge_options(defaults: Mapping[str, Any], additional_headers: Mapping[str, str] | None, options: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Combine caller options with the default options.

    Where a key holds a mapping on both sides the two are merged and the
    caller's sub-keys win. Other caller values replace the default
    wholesale. Configured additional headers override everything else.
    """
    merged: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        default = defaults.get(key)
        if isinstance(value, Mapping) and isinstance(default, Mapping):
            merged[key] = {**default, **value}
        else:
            merged[key] = value
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = dict(value) if isinstance(value, Mapping) else value
    merged['headers'] = {**(merged.get('headers') or {}), **(additional_headers or {})}
    return merged
