"""
Settings loader (``stock_config.loader``).

Responsibility
--------------
Reads the packaged ``defaults.yaml``, merges an optional user YAML file over
it section by section, applies environment overrides, and returns a frozen
``StockKernelSettings``.

Precedence (lowest to highest)
------------------------------
1. ``stock_config/defaults.yaml``
2. The file passed as ``path``
3. ``STOCK_DATABASE_URL`` and ``STOCK_LOG_LEVEL``

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys, wrong types or an unknown log level  -> ``ValueError``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import DatabaseSettings, LoggingSettings, StockKernelSettings

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

ENV_DATABASE_URL = "STOCK_DATABASE_URL"
ENV_LOG_LEVEL = "STOCK_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_SECTIONS: dict[str, type] = {
    "database": DatabaseSettings,
    "logging": LoggingSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping; an empty file gives ``{}``."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = {name: dict(values or {}) for name, values in base.items()}
    for name, values in override.items():
        if name not in _SECTIONS:
            raise ValueError(f"Unknown settings section: {name!r}")
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Section {name!r} must be a mapping")
        merged.setdefault(name, {}).update(values)
    return merged


def _coerce(section: str, key: str, value: Any, expected: Any) -> Any:
    if expected in (bool, "bool"):
        if not isinstance(value, bool):
            raise ValueError(f"{section}.{key} must be a boolean, got {value!r}")
        return value
    if expected in (int, "int"):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{section}.{key} must be a non-negative integer, got {value!r}")
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{section}.{key} must be a non-empty string, got {value!r}")
    return value.strip()


def _build_section(name: str, values: Mapping[str, Any]) -> Any:
    cls = _SECTIONS[name]
    known = {f.name: f.type for f in fields(cls)}
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ValueError(f"Unknown keys in section {name!r}: {', '.join(unknown)}")
    return cls(**{k: _coerce(name, k, v, known[k]) for k, v in values.items()})


def parse_settings(data: Mapping[str, Any]) -> StockKernelSettings:
    """Build settings from an already merged mapping."""
    sections = {name: _build_section(name, data.get(name) or {}) for name in _SECTIONS}
    settings = StockKernelSettings(**sections)

    level = settings.logging.level.upper()
    if level not in _LOG_LEVELS:
        raise ValueError(
            f"logging.level must be one of {', '.join(_LOG_LEVELS)}, got {settings.logging.level!r}"
        )
    if level != settings.logging.level:
        settings = StockKernelSettings(
            database=settings.database,
            logging=LoggingSettings(level=level),
        )
    return settings


def load_settings(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> StockKernelSettings:
    """
    Load settings from defaults, an optional file and the environment.

    Args:
        path: YAML file merged over the packaged defaults.
        env: Environment mapping; defaults to ``os.environ``.
    """
    env = os.environ if env is None else env

    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = _merge(data, load_yaml_file(Path(path)))

    overrides: dict[str, dict[str, Any]] = {}
    if env.get(ENV_DATABASE_URL):
        overrides["database"] = {"url": env[ENV_DATABASE_URL]}
    if env.get(ENV_LOG_LEVEL):
        overrides["logging"] = {"level": env[ENV_LOG_LEVEL]}
    data = _merge(data, overrides)

    return parse_settings(data)
