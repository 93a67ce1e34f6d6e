"""Tests for structlog logging setup."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from pedibrief.core.config import ObservabilityConfig
from pedibrief.core.logging_config import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def _last_json_line(err: str) -> dict:
    lines = [line for line in err.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestSetupLogging:
    def test_stdlib_extra_fields_rendered(self, capsys, restore_logging):
        setup_logging(ObservabilityConfig(json_logs=True))
        logging.getLogger("pedibrief.notify.service").info(
            "Quiz results sent", extra={"patient_id": "PEDI-2025-01-01-ABCDEFGH", "score": 80}
        )

        entry = _last_json_line(capsys.readouterr().err)
        assert entry["event"] == "Quiz results sent"
        assert entry["patient_id"] == "PEDI-2025-01-01-ABCDEFGH"
        assert entry["score"] == 80
        assert entry["level"] == "info"

    def test_service_name_bound(self, capsys, restore_logging):
        setup_logging(ObservabilityConfig(json_logs=True, service_name="pedibrief-staging"))
        logging.getLogger("pedibrief.api").warning("Startup check")

        entry = _last_json_line(capsys.readouterr().err)
        assert entry["service"] == "pedibrief-staging"

    def test_level_filters_info(self, capsys, restore_logging):
        setup_logging(ObservabilityConfig(json_logs=True, log_level="WARNING"))
        logging.getLogger("pedibrief.quiz").info("not shown")

        assert "not shown" not in capsys.readouterr().err
