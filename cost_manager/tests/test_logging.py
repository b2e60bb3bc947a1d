from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from cost_manager.config import Settings
from cost_manager.logging import configure_logging, setup_logger


@pytest.fixture(autouse=True)
def isolate_loggers() -> Iterator[None]:
    """Ensure logging handlers do not leak across tests."""

    yield
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and name.startswith("cost_manager.tests"):
            for handler in logger.handlers:
                handler.close()
            logger.handlers = []
            logger.setLevel(logging.NOTSET)


def test_setup_logger_idempotent_for_same_name(tmp_path: Path) -> None:
    first = setup_logger("cost_manager.tests.sample", json_format=True, log_path=tmp_path / "app.log")
    second = setup_logger("cost_manager.tests.sample", json_format=True, log_path=tmp_path / "app.log")

    assert first.handlers == second.handlers
    json_handlers = [handler for handler in second.handlers if getattr(handler, "_cost_manager_json", False)]
    assert len(json_handlers) == 1


def test_json_records_carry_request_fields(tmp_path: Path) -> None:
    log_path = tmp_path / "audit" / "app.log"
    logger = setup_logger("cost_manager.tests.json", json_format=True, log_path=log_path)

    logger.info("GET /health -> 200", extra={"method": "GET", "path": "/health", "process_time_ms": "1.5"})
    for handler in logger.handlers:
        handler.flush()

    record = json.loads(log_path.read_text(encoding="utf-8").splitlines()[-1])
    assert record["message"] == "GET /health -> 200"
    assert record["path"] == "/health"
    assert record["process_time_ms"] == 1.5


def test_unknown_level_falls_back_to_info() -> None:
    logger = setup_logger("cost_manager.tests.level", level="NOT-A-LEVEL")
    assert logger.level == logging.INFO


def test_configure_logging_uses_settings_level() -> None:
    root = logging.getLogger("cost_manager")
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        logger = configure_logging(Settings(log_level="WARNING"))
        assert logger.name == "cost_manager"
        assert not logger.isEnabledFor(logging.INFO)
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
