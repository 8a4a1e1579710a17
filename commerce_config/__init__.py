"""
commerce_config -- single public entrypoint for storefront configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly; services and selectors
    receive plain values (thresholds, limits, time zone) from their
    callers.

Architecture position:
    Configuration.  Sits above ``commerce_kernel`` and below
    ``commerce_services``.  The kernel MUST NEVER import from
    ``commerce_config``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Overlay order is fixed: packaged defaults, then the file named by
      ``COMMERCE_CONFIG_FILE``, then ``COMMERCE_<SECTION>_<KEY>`` variables.
    - Same inputs always produce the same checksum.

Failure modes:
    - ``ConfigurationError`` -- unknown key or invalid value.
    - ``FileNotFoundError`` -- ``COMMERCE_CONFIG_FILE`` names a missing file.

Audit relevance:
    Every successful call emits a ``COMMERCE_CONFIG_TRACE`` log entry with
    the checksum and sources of the settings in force.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from commerce_config.loader import (
    env_overrides,
    load_yaml_file,
    merge_overlay,
    parse_config,
)
from commerce_config.schema import (
    CommerceConfig,
    DatabaseSettings,
    InventorySettings,
    LoggingSettings,
    QuerySettings,
    ReportingSettings,
)

_logger = logging.getLogger("commerce_kernel.config")

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"

CONFIG_FILE_ENV = "COMMERCE_CONFIG_FILE"


def get_active_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CommerceConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_file: YAML overlay applied on top of the defaults.  When
            omitted, ``COMMERCE_CONFIG_FILE`` is consulted.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        A validated, frozen CommerceConfig.

    Raises:
        ConfigurationError: If any merged value is invalid.
        FileNotFoundError: If the overlay file does not exist.
    """
    env = os.environ if environ is None else environ

    data = load_yaml_file(DEFAULTS_FILE)
    sources = [str(DEFAULTS_FILE)]

    overlay_path = config_file or (Path(env[CONFIG_FILE_ENV]) if env.get(CONFIG_FILE_ENV) else None)
    if overlay_path is not None:
        data = merge_overlay(data, load_yaml_file(overlay_path), str(overlay_path))
        sources.append(str(overlay_path))

    overrides = env_overrides(data, env)
    if overrides:
        data = merge_overlay(data, overrides, "environment")
        sources.append("environment")

    config = parse_config(data, tuple(sources))

    _logger.info(
        "COMMERCE_CONFIG_TRACE",
        extra={
            "trace_type": "COMMERCE_CONFIG_TRACE",
            "checksum": config.checksum,
            "sources": list(config.sources),
            "reporting_timezone": config.reporting.timezone,
            "low_stock_threshold_grams": config.inventory.low_stock_threshold_grams,
        },
    )
    return config


__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULTS_FILE",
    "CommerceConfig",
    "DatabaseSettings",
    "InventorySettings",
    "LoggingSettings",
    "QuerySettings",
    "ReportingSettings",
    "get_active_config",
]
