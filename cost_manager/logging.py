"""Structured logging helpers for the cost manager service."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

from .config import Settings

CONSOLE_FORMAT: Final[str] = "[%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER: Final[str] = "cost_manager"


class JsonAuditFormatter(logging.Formatter):
    """Format log records as single-line JSON payloads."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        payload = {
            "timestamp": timestamp,
            "level": record.levelname,
            "source": record.name,
            "message": record.getMessage(),
            "method": getattr(record, "method", None),
            "path": getattr(record, "path", None),
            "status_code": getattr(record, "status_code", None),
            "process_time_ms": _coerce_number(getattr(record, "process_time_ms", None)),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _coerce_number(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    candidate = (level or "INFO").strip().upper()
    resolved = logging.getLevelName(candidate)
    return int(resolved) if isinstance(resolved, int) else logging.INFO


def _ensure_console_handler(logger: logging.Logger, level: int) -> None:
    for handler in logger.handlers:
        if getattr(handler, "_cost_manager_console", False):
            handler.setLevel(level)
            return
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    stream_handler._cost_manager_console = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)


def _ensure_json_handler(logger: logging.Logger, level: int, log_path: Path) -> None:
    for handler in logger.handlers:
        if getattr(handler, "_cost_manager_json", False):
            handler.setLevel(level)
            return
    log_path.parent.mkdir(parents=True, exist_ok=True)
    json_handler = logging.FileHandler(log_path, encoding="utf-8")
    json_handler.setLevel(level)
    json_handler.setFormatter(JsonAuditFormatter())
    json_handler._cost_manager_json = True  # type: ignore[attr-defined]
    logger.addHandler(json_handler)


def setup_logger(
    name: str = ROOT_LOGGER,
    json_format: bool = False,
    level: str | int | None = None,
    log_path: Path | None = None,
) -> logging.Logger:
    """Configure and return a logger; repeated calls never duplicate handlers."""

    resolved_level = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(resolved_level)
    # Keep propagation so capture handlers such as pytest's caplog still see records.
    logger.propagate = True
    _ensure_console_handler(logger, resolved_level)
    if json_format:
        _ensure_json_handler(logger, resolved_level, log_path or Settings().log_path)
    return logger


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach handlers to the package root logger according to ``settings``."""

    return setup_logger(
        ROOT_LOGGER,
        json_format=settings.json_logs,
        level=settings.log_level,
        log_path=settings.log_path,
    )


__all__ = ["JsonAuditFormatter", "configure_logging", "setup_logger"]
