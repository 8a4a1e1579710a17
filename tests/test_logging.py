"""Tests for the structured logging system (commerce_kernel/logging_config.py)."""

import json
import logging
import threading
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from commerce_kernel.domain.order_lifecycle import OrderStatus, TransitionTrigger
from commerce_kernel.exceptions import FulfillmentBlockedError
from commerce_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def stream() -> StringIO:
    out = StringIO()
    handler = logging.StreamHandler(out)
    handler.setFormatter(StructuredFormatter())
    configure_logging(handler=handler)
    return out


def _records(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestStructuredFormatter:

    def test_event_line(self, stream):
        LogContext.set(order_id="ord-1", trigger="admin")
        get_logger("services.transition").info(
            "order_transition_applied", extra={"from_status": "PAID"}
        )

        [record] = _records(stream)
        assert record["message"] == "order_transition_applied"
        assert record["logger"] == "commerce_kernel.services.transition"
        assert record["order_id"] == "ord-1"
        assert record["from_status"] == "PAID"
        assert record["ts"].endswith("+00:00")

    def test_context_wins_over_extra(self, stream):
        with LogContext.bind(order_id="bound"):
            get_logger("test").info("collision", extra={"order_id": "passed"})

        assert _records(stream)[0]["order_id"] == "bound"

    def test_fulfillment_error_fields(self, stream):
        try:
            raise FulfillmentBlockedError(
                order_id="ord-1",
                strain_id=None,
                strain_name="Blue Dream",
                reason="strain no longer in catalog",
                requested_grams=4,
            )
        except FulfillmentBlockedError:
            get_logger("test").warning("blocked", exc_info=True)

        record = _records(stream)[0]
        assert record["exc_code"] == "FULFILLMENT_BLOCKED"
        assert record["exc_message"] == "cannot fulfill: strain no longer in catalog for Blue Dream"
        assert record["exc_strain_name"] == "Blue Dream"
        assert record["exc_strain_id"] is None
        assert record["exc_available_grams"] is None
        assert "FulfillmentBlockedError" in record["traceback"]

    def test_values_serialized(self, stream):
        uid = uuid4()
        at = datetime(2024, 6, 15, 15, 0, tzinfo=timezone.utc)
        get_logger("test").info(
            "values",
            extra={
                "strain_id": uid,
                "at": at,
                "status": OrderStatus.PAID,
                "trigger_used": TransitionTrigger.TIMEOUT,
                "ratio": Decimal("12.50"),
            },
        )

        record = _records(stream)[0]
        assert record["strain_id"] == str(uid)
        assert record["at"] == "2024-06-15T15:00:00+00:00"
        assert record["status"] == "PAID"
        assert record["trigger_used"] == "timeout"
        assert record["ratio"] == "12.50"


class TestLogContext:

    def test_unknown_field_rejected_by_set(self):
        LogContext.set(order_id="kept")
        with pytest.raises(TypeError, match="event_id"):
            LogContext.set(event_id="evt-1")
        assert LogContext.get_all() == {"order_id": "kept"}

    def test_unknown_field_rejected_by_bind(self):
        with pytest.raises(TypeError, match="strain_id"):
            with LogContext.bind(order_id="o", strain_id="s"):
                pass
        assert LogContext.get_all() == {}

    def test_get_all_is_a_copy(self):
        LogContext.set(order_id="o")
        LogContext.get_all()["order_id"] = "changed"
        assert LogContext.get_all() == {"order_id": "o"}

    def test_nested_bind_restores_each_level(self):
        with LogContext.bind(correlation_id="evt", actor_id=None):
            with LogContext.bind(order_id="o", trigger="admin"):
                assert LogContext.get_all() == {
                    "correlation_id": "evt",
                    "order_id": "o",
                    "trigger": "admin",
                }
            assert LogContext.get_all() == {"correlation_id": "evt"}
        assert LogContext.get_all() == {}

    def test_bind_restores_after_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(order_id="o"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_thread_context_does_not_leak(self):
        LogContext.set(request_id="main")
        seen = {}

        def worker():
            LogContext.set(order_id="from-thread")
            seen.update(LogContext.get_all())

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen["order_id"] == "from-thread"
        assert LogContext.get_all() == {"request_id": "main"}


class TestConfigureLogging:

    def test_first_call_wins(self, stream):
        other = StringIO()
        configure_logging(handler=logging.StreamHandler(other), level=logging.DEBUG)

        get_logger("test").debug("dropped")
        get_logger("test").info("kept")

        assert [r["message"] for r in _records(stream)] == ["kept"]
        assert other.getvalue() == ""

    def test_does_not_propagate_to_root(self, stream):
        assert logging.getLogger("commerce_kernel").propagate is False

    def test_reset_allows_reconfigure(self, stream):
        reset_logging()
        fresh = StringIO()
        handler = logging.StreamHandler(fresh)
        handler.setFormatter(StructuredFormatter())
        configure_logging(handler=handler, level=logging.DEBUG)

        get_logger("test").debug("visible")

        assert stream.getvalue() == ""
        assert json.loads(fresh.getvalue())["message"] == "visible"
