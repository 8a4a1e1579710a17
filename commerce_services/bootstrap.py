"""
Process startup: logging and database engine from CommerceConfig.

Called once by whatever hosts the admin facade and webhook handler (web
worker, seed script).  After ``init_from_config`` returns, ``AdminApi()``
and ``PaymentEventHandler()`` may be built without a session factory and
will use the module-level engine.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from commerce_config import CommerceConfig, get_active_config
from commerce_kernel.db.engine import create_tables, init_engine_from_url
from commerce_kernel.exceptions import ConfigurationError
from commerce_kernel.logging_config import configure_logging, get_logger

logger = get_logger("services.bootstrap")


def init_from_config(
    config: CommerceConfig | None = None,
    create_schema: bool = False,
) -> Engine:
    """
    Configure logging and initialize the engine.

    Args:
        config: Settings; ``get_active_config()`` when omitted.
        create_schema: Create missing tables (local runs and demos only).

    Raises:
        ConfigurationError: if ``database.url`` is not set.
    """
    config = config or get_active_config()
    configure_logging(level=getattr(logging, config.logging.level))

    database = config.database
    if not database.url:
        raise ConfigurationError(
            "database.url",
            "must be set (COMMERCE_DATABASE_URL or a config file overlay)",
        )

    engine = init_engine_from_url(
        database.url,
        echo=database.echo,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
    )
    if create_schema:
        create_tables()

    logger.info(
        "commerce_initialized",
        extra={"config_checksum": config.checksum, "dialect": engine.dialect.name},
    )
    return engine
