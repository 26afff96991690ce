"""Configuration loading: ``.env`` credentials plus YAML run settings."""

from __future__ import annotations

import json
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .logging_config import get_logger
from .models import FilterSpec

LOGGER = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yml")
DEFAULT_STATUS_CELL = "_config!F13"

DEFAULT_CONFIG: dict[str, Any] = {
    "filters": [
        {"group": "Trade item", "kind": "checkbox", "options": {"Cut flowers": True}, "others": False},
        {"group": "", "kind": "toggle", "control": "button", "options": {"All": True}},
        {"group": "Supply", "kind": "toggle", "options": {"Direct sales": False}},
        {"group": "Supply", "kind": "checkbox", "options": {"Clock pre-sales": True, "Aalsmeer": True}},
    ],
    "page_size": 96,
    "max_pages": 500,
    "timeouts": {"action_ms": 120_000, "grid_ms": 60_000, "tab_ms": 60_000},
    "settle_ms": {},
    "health_log": "logs/health.log",
}

_CREDENTIAL_VARS = ("FLORIDAY_EMAIL", "FLORIDAY_PASSWORD")
_SINK_VARS = ("GOOGLE_SERVICE_ACCOUNT_JSON", "GOOGLE_SHEET_ID", "TARGET_SHEET_NAME")


class Timeouts(BaseModel):
    model_config = ConfigDict(extra="forbid")

    action_ms: int = Field(default=120_000, gt=0)
    grid_ms: int = Field(default=60_000, gt=0)
    tab_ms: int = Field(default=60_000, gt=0)


class SheetTarget(BaseModel):
    """Where the status marker and the product table are written."""

    service_account_info: dict[str, Any]
    spreadsheet_id: str
    target_sheet: str
    status_cell: str = DEFAULT_STATUS_CELL


class Settings(BaseModel):
    """Validated settings for one scrape run."""

    email: str
    password: str
    sheet: SheetTarget | None = None
    filters: list[FilterSpec] = Field(default_factory=list)
    page_size: int | None = 96
    max_pages: int | None = Field(default=500, ge=1)
    timeouts: Timeouts = Field(default_factory=Timeouts)
    settle_ms: dict[str, int] = Field(default_factory=dict)
    health_log: str = "logs/health.log"

    @field_validator("page_size")
    @classmethod
    def _positive_page_size(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("page_size must be positive")
        return value


def _deep_merge(default: Any, override: Any) -> Any:
    if not isinstance(default, dict) or not isinstance(override, dict):
        return deepcopy(override)

    merged: dict[str, Any] = deepcopy(default)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Read the YAML run configuration merged over :data:`DEFAULT_CONFIG`."""

    config_path = path or DEFAULT_CONFIG_PATH
    if config_path.exists():
        try:
            with config_path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    else:
        LOGGER.warning("Configuration file %s not found; using defaults", config_path)
        data = {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    return _deep_merge(DEFAULT_CONFIG, data) if data else deepcopy(DEFAULT_CONFIG)


def _missing(env: Mapping[str, str], names: tuple[str, ...]) -> list[str]:
    return [name for name in names if not (env.get(name) or "").strip()]


def _sheet_target(env: Mapping[str, str]) -> SheetTarget:
    raw = env["GOOGLE_SERVICE_ACCOUNT_JSON"]
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"GOOGLE_SERVICE_ACCOUNT_JSON is not valid JSON: {exc.msg}") from exc
    if not isinstance(info, dict):
        raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON must be a JSON object")
    return SheetTarget(
        service_account_info=info,
        spreadsheet_id=env["GOOGLE_SHEET_ID"].strip(),
        target_sheet=env["TARGET_SHEET_NAME"].strip(),
        status_cell=(env.get("STATUS_CELL") or DEFAULT_STATUS_CELL).strip(),
    )


def load_settings(
    config: Mapping[str, Any],
    env: Mapping[str, str] | None = None,
    *,
    require_sheet: bool = True,
) -> Settings:
    """Combine environment credentials with the YAML config.

    Raises :class:`ConfigurationError` before any browser or sheet work when a
    required variable is missing or the config does not validate.
    """

    source = os.environ if env is None else env
    required = _CREDENTIAL_VARS + (_SINK_VARS if require_sheet else ())
    missing = _missing(source, required)
    if missing:
        raise ConfigurationError("Missing required environment variables: " + ", ".join(missing))

    sheet = _sheet_target(source) if require_sheet else None
    try:
        return Settings(
            email=source["FLORIDAY_EMAIL"].strip(),
            password=source["FLORIDAY_PASSWORD"],
            sheet=sheet,
            filters=config.get("filters") or [],
            page_size=config.get("page_size"),
            max_pages=config.get("max_pages"),
            timeouts=config.get("timeouts") or {},
            settle_ms=config.get("settle_ms") or {},
            health_log=config.get("health_log") or "logs/health.log",
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
