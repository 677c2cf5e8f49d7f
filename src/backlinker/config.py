"""Configuration for the backlink engine.

Settings live in a TOML file::

    [backlinks]
    include_resolved   = true
    include_unresolved = true
    use_cache          = true
    cache_timeout      = 30000     # milliseconds
    only_daily_notes   = false

    [cache]
    max_size = 100

    [blocks]
    strategy = "default"           # default | headers-only | top-line

    [daily_notes]
    folder  = "Journal"
    enabled = true

Every section and key is optional; unknown keys are ignored.
"""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from backlinker.exceptions import ConfigError

DEFAULT_CACHE_TIMEOUT_MS = 30_000
DEFAULT_MAX_CACHE_SIZE = 100
DEFAULT_STRATEGY = "default"


def _check_type(section: str, key: str, value: Any, expected: type) -> Any:
    # bool is an int subclass; keep them apart
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"[{section}] {key} must be an integer, got {value!r}")
    if not isinstance(value, expected):
        raise ConfigError(
            f"[{section}] {key} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


# ---------------------------------------------------------------------------
# Discovery options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DiscoveryOptions:
    include_resolved: bool = True
    include_unresolved: bool = True
    use_cache: bool = True
    cache_timeout: int = DEFAULT_CACHE_TIMEOUT_MS  # ms
    only_daily_notes: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscoveryOptions":
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name in data:
                expected = int if f.name == "cache_timeout" else bool
                kwargs[f.name] = _check_type("backlinks", f.name, data[f.name], expected)
        options = cls(**kwargs)
        if options.cache_timeout < 0:
            raise ConfigError("[backlinks] cache_timeout must not be negative")
        return options

    def updated(self, **changes: Any) -> "DiscoveryOptions":
        """Return a copy with *changes* applied (validated like ``from_dict``)."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"Unknown discovery option(s): {', '.join(sorted(unknown))}")
        return DiscoveryOptions.from_dict({**asdict(self), **changes})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    options: DiscoveryOptions = field(default_factory=DiscoveryOptions)
    max_cache_size: int = DEFAULT_MAX_CACHE_SIZE
    block_strategy: str = DEFAULT_STRATEGY
    daily_notes_folder: str = ""
    daily_notes_enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        backlinks = data.get("backlinks", {})
        cache = data.get("cache", {})
        blocks = data.get("blocks", {})
        daily = data.get("daily_notes", {})
        for name, section in (
            ("backlinks", backlinks),
            ("cache", cache),
            ("blocks", blocks),
            ("daily_notes", daily),
        ):
            if not isinstance(section, dict):
                raise ConfigError(f"[{name}] must be a table")

        settings = cls(options=DiscoveryOptions.from_dict(backlinks))
        if "max_size" in cache:
            max_size = _check_type("cache", "max_size", cache["max_size"], int)
            if max_size < 1:
                raise ConfigError("[cache] max_size must be at least 1")
            settings = replace(settings, max_cache_size=max_size)
        if "strategy" in blocks:
            settings = replace(
                settings,
                block_strategy=_check_type("blocks", "strategy", blocks["strategy"], str),
            )
        if "folder" in daily:
            settings = replace(
                settings,
                daily_notes_folder=_check_type("daily_notes", "folder", daily["folder"], str),
            )
        if "enabled" in daily:
            settings = replace(
                settings,
                daily_notes_enabled=_check_type("daily_notes", "enabled", daily["enabled"], bool),
            )
        return settings

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Read settings from a TOML file; a missing file yields defaults."""
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            with open(path, "rb") as fh:
                data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        return cls.from_dict(data)
