"""Tests for logging setup."""

from datetime import date
from decimal import Decimal

import structlog

from ledgerbook.config.logging import bind_report_context, stringify_amounts


def test_stringify_amounts():
    event = {"event": "report", "total": Decimal("125000.00"), "as_of": date(2025, 3, 31), "rows": 3}

    result = stringify_amounts(None, "info", event)

    assert result == {"event": "report", "total": "125000.00", "as_of": "2025-03-31", "rows": 3}


def test_bind_report_context_replaces_previous_values():
    """Test that each run starts from a clean logging context."""
    structlog.contextvars.bind_contextvars(stale="yes")

    bind_report_context(report="gstr1", client_id="c-1")

    try:
        assert structlog.contextvars.get_contextvars() == {"report": "gstr1", "client_id": "c-1"}
    finally:
        structlog.contextvars.clear_contextvars()
