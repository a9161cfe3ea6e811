from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from .schemas import MonitoringConfig, MonitoringConfigUpdate, WeatherDataStore, WeatherLogEntry, WeatherSummary

logger = logging.getLogger("weatherdesk.monitoring")


def _parse_ts(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MonitoringStore:
    """Monitoring readings, the last summary and the monitoring config in one JSON file.

    The file is read and rewritten wholesale on every change. A missing or
    unreadable file yields an empty store with ``default_config``.
    """

    def __init__(self, file_path: Path, max_logs: int = 672, default_config: MonitoringConfig | None = None) -> None:
        self.file_path = Path(file_path)
        self.max_logs = max(1, max_logs)
        self.default_config = default_config or MonitoringConfig()
        self._lock = threading.RLock()

    def _empty(self) -> WeatherDataStore:
        return WeatherDataStore(config=self.default_config.model_copy())

    def read(self) -> WeatherDataStore:
        with self._lock:
            if not self.file_path.exists():
                return self._empty()
            try:
                raw = json.loads(self.file_path.read_text(encoding="utf-8"))
                return WeatherDataStore.model_validate(raw)
            except (json.JSONDecodeError, OSError, ValidationError) as exc:
                logger.warning(
                    "monitoring_store_unreadable",
                    extra={"extra_fields": {"path": str(self.file_path), "error": exc.__class__.__name__}},
                )
                return self._empty()

    def write(self, data: WeatherDataStore) -> None:
        with self._lock:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.file_path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data.model_dump(by_alias=True), ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.file_path)

    def add_log(self, entry: WeatherLogEntry) -> WeatherLogEntry:
        with self._lock:
            data = self.read()
            data.logs.append(entry)
            if len(data.logs) > self.max_logs:
                data.logs = data.logs[-self.max_logs :]
            self.write(data)
        return entry

    def latest(self) -> WeatherLogEntry | None:
        logs = self.read().logs
        return logs[-1] if logs else None

    def logs_for_period(self, hours: float, now: datetime | None = None) -> list[WeatherLogEntry]:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(hours=hours)
        return [entry for entry in self.read().logs if _parse_ts(entry.timestamp) >= cutoff]

    def all_logs(self) -> list[WeatherLogEntry]:
        return self.read().logs

    def save_summary(self, summary: WeatherSummary) -> WeatherSummary:
        with self._lock:
            data = self.read()
            data.last_summary = summary
            self.write(data)
        return summary

    def last_summary(self) -> WeatherSummary | None:
        return self.read().last_summary

    def needs_new_summary(self, now: datetime | None = None) -> bool:
        data = self.read()
        if data.last_summary is None:
            return bool(data.logs)
        elapsed = (now or datetime.now(timezone.utc)) - _parse_ts(data.last_summary.generated_at)
        return elapsed >= timedelta(minutes=data.config.summary_interval_minutes)

    def get_config(self) -> MonitoringConfig:
        return self.read().config

    def update_config(self, update: MonitoringConfigUpdate) -> MonitoringConfig:
        with self._lock:
            data = self.read()
            data.config = data.config.model_copy(update=update.model_dump(exclude_none=True))
            self.write(data)
        return data.config
