"""
Structured logging tests: JSON formatting, LogContext, exception fields.
"""

import json
import logging
import sys
from decimal import Decimal
from uuid import uuid4

from payments_kernel.exceptions import InsufficientBalanceError
from payments_kernel.logging_config import LogContext, StructuredFormatter, get_logger


def _format(record: logging.LogRecord) -> dict:
    return json.loads(StructuredFormatter().format(record))


def _record(msg: str, exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "payments_kernel.test", logging.INFO, __file__, 1, msg, (), exc_info
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:

    def test_base_fields_and_extras(self):
        payload = _format(_record("balance_credited", amount=Decimal("1.50"), profile_id=uuid4()))

        assert payload["message"] == "balance_credited"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "payments_kernel.test"
        assert payload["amount"] == "1.50"
        assert "ts" in payload

    def test_context_fields_included(self):
        with LogContext.bind(correlation_id="abc", job_id="job-1"):
            payload = _format(_record("payment_started"))

        assert payload["correlation_id"] == "abc"
        assert payload["job_id"] == "job-1"

    def test_context_restored_after_bind(self):
        with LogContext.bind(actor_id="outer"):
            with LogContext.bind(actor_id="inner"):
                assert LogContext.get_all()["actor_id"] == "inner"

            assert LogContext.get_all()["actor_id"] == "outer"

        assert "actor_id" not in LogContext.get_all()

    def test_kernel_exception_fields(self):
        try:
            raise InsufficientBalanceError("p-1", "5.00", "10.00")
        except InsufficientBalanceError:
            payload = _format(_record("payment_rejected", exc_info=sys.exc_info()))

        assert payload["exc_type"] == "InsufficientBalanceError"
        assert payload["exc_code"] == "INSUFFICIENT_BALANCE"
        assert payload["exc_balance"] == "5.00"
        assert payload["exc_required"] == "10.00"
        assert "traceback" in payload


class TestGetLogger:

    def test_namespace(self):
        assert get_logger("services.x").name == "payments_kernel.services.x"
