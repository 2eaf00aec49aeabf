"""Tests for the logging helpers."""

import logging

import pytest

from opsdesk.core import logging as opsdesk_logging


@pytest.mark.unit
class TestLoggingHelpers:
    """Tests for configure_logfire, span and log_with_context."""

    def test_configure_logfire_only_sends_with_token(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(opsdesk_logging.logfire, "configure", lambda **kwargs: captured.update(kwargs))

        opsdesk_logging.configure_logfire()

        assert captured["send_to_logfire"] == "if-token-present"
        assert captured["service_name"] == opsdesk_logging.settings.service_name

    def test_span_is_context_manager(self):
        with opsdesk_logging.span("tests.span"):
            pass

    def test_log_with_context(self, caplog):
        logger = logging.getLogger("tests.context")

        with caplog.at_level(logging.WARNING, logger="tests.context"):
            opsdesk_logging.log_with_context(logger, "warning", "Supply below minimum", supply_id="abc", quantity=1)

        record = caplog.records[-1]
        assert record.levelname == "WARNING"
        assert record.supply_id == "abc"
        assert record.quantity == 1
