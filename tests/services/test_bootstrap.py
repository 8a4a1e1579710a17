"""Tests for init_from_config (commerce_services/bootstrap.py).

The engine initializer is replaced so the suite's module-level engine is
left alone.
"""

import logging

import pytest
from sqlalchemy import create_engine

from commerce_config import get_active_config
from commerce_kernel.exceptions import ConfigurationError
from commerce_services import bootstrap


@pytest.fixture
def recorded(monkeypatch):
    calls = {}

    def fake_init(url, **kwargs):
        calls["engine"] = (url, kwargs)
        return create_engine("sqlite://")

    monkeypatch.setattr(bootstrap, "init_engine_from_url", fake_init)
    monkeypatch.setattr(bootstrap, "configure_logging", lambda level: calls.setdefault("level", level))
    monkeypatch.setattr(bootstrap, "create_tables", lambda: calls.setdefault("schema", True))
    return calls


def test_engine_built_from_database_settings(recorded):
    config = get_active_config(
        environ={
            "COMMERCE_DATABASE_URL": "sqlite:///storefront.db",
            "COMMERCE_DATABASE_POOL_SIZE": "3",
            "COMMERCE_LOGGING_LEVEL": "debug",
        }
    )

    engine = bootstrap.init_from_config(config)

    assert engine.dialect.name == "sqlite"
    url, kwargs = recorded["engine"]
    assert url == "sqlite:///storefront.db"
    assert kwargs == {"echo": False, "pool_size": 3, "max_overflow": 10}
    assert recorded["level"] == logging.DEBUG
    assert "schema" not in recorded


def test_create_schema(recorded):
    config = get_active_config(environ={"COMMERCE_DATABASE_URL": "sqlite://"})
    bootstrap.init_from_config(config, create_schema=True)
    assert recorded["schema"] is True


def test_missing_url(recorded):
    with pytest.raises(ConfigurationError) as exc_info:
        bootstrap.init_from_config(get_active_config(environ={}))
    assert exc_info.value.key == "database.url"
    assert "engine" not in recorded
