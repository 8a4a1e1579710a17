"""
Configuration Loader (``commerce_config.loader``).

Responsibility
--------------
Reads YAML settings, overlays environment variables and parses the merged
mapping into a frozen ``CommerceConfig``.  The single public entry point
for runtime config is ``commerce_config.get_active_config()``.

Invariants enforced
-------------------
* Overlays may only set keys that exist in ``defaults.yaml``; unknown
  sections or keys raise ``ConfigurationError``.
* Every value is type- and range-checked before a ``CommerceConfig`` is
  built.  ``week_window_days <= month_window_days`` and each default
  limit is within its maximum.
* ``compute_checksum`` is deterministic over the merged mapping.

Failure modes
-------------
* Missing overlay file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid value or unknown key  -> ``ConfigurationError``.
"""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from commerce_config.schema import (
    CommerceConfig,
    DatabaseSettings,
    InventorySettings,
    LoggingSettings,
    QuerySettings,
    ReportingSettings,
)
from commerce_kernel.exceptions import ConfigurationError

ENV_PREFIX = "COMMERCE_"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def merge_overlay(
    base: dict[str, Any], overlay: Mapping[str, Any], source: str
) -> dict[str, Any]:
    """Return ``base`` with the values of ``overlay`` applied section by section."""
    merged = copy.deepcopy(base)
    for section, values in overlay.items():
        if section not in merged:
            raise ConfigurationError(section, f"unknown section in {source}")
        if not isinstance(values, Mapping):
            raise ConfigurationError(section, f"must be a mapping in {source}")
        for key, value in values.items():
            if key not in merged[section]:
                raise ConfigurationError(f"{section}.{key}", f"unknown key in {source}")
            merged[section][key] = value
    return merged


def env_overrides(base: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Collect ``COMMERCE_<SECTION>_<KEY>`` variables for keys present in ``base``.

    Values are parsed as YAML scalars, so ``"25"`` becomes 25 and
    ``"false"`` becomes False.
    """
    overlay: dict[str, dict[str, Any]] = {}
    for section, values in base.items():
        for key in values:
            name = f"{ENV_PREFIX}{section}_{key}".upper()
            if name in environ:
                overlay.setdefault(section, {})[key] = yaml.safe_load(environ[name])
    return overlay


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any], sources: tuple[str, ...] = ()) -> CommerceConfig:
    """Validate the merged mapping and build a ``CommerceConfig``."""
    inventory = data["inventory"]
    reporting = data["reporting"]
    queries = data["queries"]
    database = data["database"]
    logging_section = data["logging"]

    week = _positive_int("reporting.week_window_days", reporting["week_window_days"])
    month = _positive_int("reporting.month_window_days", reporting["month_window_days"])
    if week > month:
        raise ConfigurationError(
            "reporting.week_window_days",
            f"must not exceed month_window_days ({week} > {month})",
        )

    max_limit = _positive_int("queries.max_limit", queries["max_limit"])
    default_limit = _bounded_int("queries.default_limit", queries["default_limit"], max_limit)
    max_page = _positive_int("queries.max_page_size", queries["max_page_size"])
    default_page = _bounded_int(
        "queries.default_page_size", queries["default_page_size"], max_page
    )

    url = database["url"]
    if url is not None and not isinstance(url, str):
        raise ConfigurationError("database.url", f"must be a string, got {url!r}")
    echo = database["echo"]
    if not isinstance(echo, bool):
        raise ConfigurationError("database.echo", f"must be true or false, got {echo!r}")

    level = str(logging_section["level"]).upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError("logging.level", f"unknown level {level!r}")

    return CommerceConfig(
        inventory=InventorySettings(
            low_stock_threshold_grams=_non_negative_int(
                "inventory.low_stock_threshold_grams",
                inventory["low_stock_threshold_grams"],
            ),
        ),
        reporting=ReportingSettings(
            timezone=_timezone("reporting.timezone", reporting["timezone"]),
            week_window_days=week,
            month_window_days=month,
        ),
        queries=QuerySettings(
            default_limit=default_limit,
            max_limit=max_limit,
            default_page_size=default_page,
            max_page_size=max_page,
        ),
        database=DatabaseSettings(
            url=url,
            echo=echo,
            pool_size=_positive_int("database.pool_size", database["pool_size"]),
            max_overflow=_non_negative_int("database.max_overflow", database["max_overflow"]),
        ),
        logging=LoggingSettings(level=level),
        checksum=compute_checksum(data),
        sources=sources,
    )


def _non_negative_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(key, f"must be a non-negative integer, got {value!r}")
    return value


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(key, f"must be a positive integer, got {value!r}")
    return value


def _bounded_int(key: str, value: Any, maximum: int) -> int:
    value = _positive_int(key, value)
    if value > maximum:
        raise ConfigurationError(key, f"must be <= {maximum}, got {value}")
    return value


def _timezone(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(key, f"must be an IANA zone name, got {value!r}")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(key, f"unknown time zone {value!r}") from exc
    return value
