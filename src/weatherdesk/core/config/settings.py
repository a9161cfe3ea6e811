"""Configuration loader for weatherdesk.

Values are resolved in three layers: model defaults, an optional YAML file
(``WEATHERDESK_CONFIG``), then ``WEATHERDESK_*`` environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

_ENV_PREFIX = "WEATHERDESK_"


def _default_state_dir() -> Path:
    return Path.home() / ".weatherdesk"


class Settings(BaseModel):
    state_dir: Path = Field(default_factory=_default_state_dir)
    test_mode: bool = False
    timezone: str = "Europe/Riga"

    cache_ttl_s: float = 300
    cache_sweep_interval_s: int = 60

    yandex_api_key: Optional[str] = None
    weather_api_url: str = "https://api.weather.yandex.ru/v2/forecast"

    llm_provider: str = "off"
    llm_url: str = "http://127.0.0.1:8001/v1/chat/completions"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: Optional[str] = None
    llm_timeout_s: float = 45
    llm_temperature: float = 0.3
    llm_max_tokens: int = 1024
    max_tool_round_trips: int = 5
    history_turns: int = 10

    reports_dir: Optional[Path] = None
    public_base_url: str = "http://127.0.0.1:8000"

    monitoring_enabled: bool = False
    monitoring_city: str = "Рига"
    monitoring_cron: str = "*/15 * * * *"
    summary_interval_minutes: int = 60
    monitoring_max_logs: int = 672

    @field_validator("state_dir", "reports_dir")
    @classmethod
    def _expand_user(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @field_validator("llm_provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        normalized = value.strip().casefold()
        if normalized not in {"off", "http"}:
            raise ValueError("llm_provider must be 'off' or 'http'")
        return normalized

    @field_validator("max_tool_round_trips", "history_turns", "monitoring_max_logs")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @property
    def resolved_reports_dir(self) -> Path:
        return self.reports_dir or (self.state_dir / "reports")

    @property
    def monitoring_data_file(self) -> Path:
        return self.state_dir / "data" / "weather-data.json"


def _env_overrides(environ: dict[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{_ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if Settings.model_fields[name].annotation is bool:
            overrides[name] = raw.strip().casefold() in {"1", "true", "yes", "on"}
        else:
            overrides[name] = raw
    if "yandex_api_key" not in overrides and environ.get("YANDEX_WEATHER_API_KEY"):
        overrides["yandex_api_key"] = environ["YANDEX_WEATHER_API_KEY"]
    return overrides


def load_settings(path: Optional[str] = None, environ: Optional[dict[str, str]] = None) -> Settings:
    """Load and validate settings from YAML (optional) and the environment."""
    env = dict(os.environ if environ is None else environ)
    data: dict[str, Any] = {}
    cfg_path = path or env.get(f"{_ENV_PREFIX}CONFIG")
    if cfg_path:
        with Path(cfg_path).expanduser().open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"config file {cfg_path} must contain a mapping")
    data.update(_env_overrides(env))
    return Settings.model_validate(data)
