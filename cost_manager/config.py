"""Runtime settings for the cost manager service.

Values are resolved in three layers: built-in defaults, an optional YAML file
pointed to by ``COST_MANAGER_CONFIG`` and finally individual environment
variables, so a deployment can override a single knob without a file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Final

import yaml

CONFIG_ENV_FLAG: Final[str] = "COST_MANAGER_CONFIG"
DATABASE_ENV_FLAG: Final[str] = "COST_MANAGER_DATABASE_URL"
LEVEL_ENV_FLAG: Final[str] = "COST_MANAGER_LOG_LEVEL"
JSON_ENV_FLAG: Final[str] = "COST_MANAGER_JSON_LOGS"

DEFAULT_SQLITE_PATH: Final[Path] = Path(__file__).with_name("costs.db")
DEFAULT_TEAM: Final[tuple[dict[str, str], ...]] = (
    {"first_name": "Hadar", "last_name": "Ben Zaken"},
    {"first_name": "Shoham", "last_name": "Margalit"},
)

__all__ = ["Settings", "load_settings"]


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved configuration.

    Attributes:
      database_url: SQLAlchemy URL of the record store.
      log_level: Name of the level applied to the ``cost_manager`` loggers.
      json_logs: Whether to also write one-line JSON records to ``log_path``.
      log_path: Destination of the JSON log file.
      team_members: Records served by ``GET /about``.
    """

    database_url: str = f"sqlite:///{DEFAULT_SQLITE_PATH}"
    log_level: str = "INFO"
    json_logs: bool = False
    log_path: Path = Path("logs") / "cost_manager.log"
    team_members: tuple[dict[str, str], ...] = field(default=DEFAULT_TEAM)


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _read_file(path: Path | str) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return dict(payload)


def _team_from(raw: object) -> tuple[dict[str, str], ...]:
    if not isinstance(raw, list):
        raise ValueError("team_members must be a list")
    members = []
    for entry in raw:
        if not isinstance(entry, Mapping) or not {"first_name", "last_name"} <= entry.keys():
            raise ValueError("team_members entries need first_name and last_name")
        members.append({"first_name": str(entry["first_name"]), "last_name": str(entry["last_name"])})
    return tuple(members)


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings` from an optional YAML file and the environment."""

    env = os.environ if environ is None else environ
    settings = Settings()

    config_path = path if path is not None else env.get(CONFIG_ENV_FLAG)
    if config_path:
        raw = _read_file(config_path)
        updates: dict[str, Any] = {}
        if "database_url" in raw:
            updates["database_url"] = str(raw["database_url"])
        if "log_level" in raw:
            updates["log_level"] = str(raw["log_level"]).upper()
        if "json_logs" in raw:
            updates["json_logs"] = _as_bool(raw["json_logs"])
        if "log_path" in raw:
            updates["log_path"] = Path(raw["log_path"])
        if "team_members" in raw:
            updates["team_members"] = _team_from(raw["team_members"])
        settings = replace(settings, **updates)

    if env.get(DATABASE_ENV_FLAG):
        settings = replace(settings, database_url=env[DATABASE_ENV_FLAG])
    if env.get(LEVEL_ENV_FLAG):
        settings = replace(settings, log_level=env[LEVEL_ENV_FLAG].strip().upper())
    if env.get(JSON_ENV_FLAG) is not None:
        settings = replace(settings, json_logs=_as_bool(env[JSON_ENV_FLAG]))
    return settings
