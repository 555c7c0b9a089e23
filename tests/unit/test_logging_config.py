"""Tests for structlog-backed logging setup."""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from medcard.core.config import ObservabilityConfig
from medcard.core.logging_config import setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_sets_package_level(self, restore_root_logging) -> None:
        setup_logging(ObservabilityConfig(log_level="DEBUG"))
        assert logging.getLogger("medcard").level == logging.DEBUG

    def test_installs_processor_formatter(self, restore_root_logging) -> None:
        setup_logging(ObservabilityConfig())
        (handler,) = logging.getLogger().handlers
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_root_logging) -> None:
        setup_logging(ObservabilityConfig(log_level="chatty"))
        assert logging.getLogger().level == logging.INFO

    def test_extra_fields_reach_json_output(self, restore_root_logging, monkeypatch) -> None:
        stream = io.StringIO()
        monkeypatch.setattr("sys.stderr", stream)
        setup_logging(ObservabilityConfig())

        logging.getLogger("medcard.stores.blob_store").error(
            "Blob upload failed", extra={"bucket": "medical-records", "path": "u1/card.pdf"}
        )

        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["event"] == "Blob upload failed"
        assert line["bucket"] == "medical-records"
        assert line["path"] == "u1/card.pdf"
        assert line["level"] == "error"
