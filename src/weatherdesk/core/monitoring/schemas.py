from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from weatherdesk.core.weather.schemas import WeatherRecord


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class WeatherLogEntry(BaseModel):
    timestamp: str
    city: str
    temperature: float
    condition: str
    humidity: float
    pressure: float
    feels_like: float | None = None
    wind_speed: float | None = None

    @classmethod
    def from_record(cls, record: WeatherRecord, timestamp: str | None = None) -> "WeatherLogEntry":
        return cls(
            timestamp=timestamp or now_iso(),
            city=record.city,
            temperature=record.temperature,
            condition=record.condition,
            humidity=record.humidity,
            pressure=record.pressure,
            feels_like=record.feels_like,
            wind_speed=record.wind_speed,
        )


class SummaryPeriod(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(alias="from")
    end: str = Field(alias="to")


class WeatherSummary(BaseModel):
    text: str
    generated_at: str
    period: SummaryPeriod
    entries_count: int


class MonitoringConfig(BaseModel):
    city: str = "Рига"
    cron_schedule: str = "*/15 * * * *"
    summary_interval_minutes: int = Field(default=60, ge=1)


class MonitoringConfigUpdate(BaseModel):
    city: str | None = Field(default=None, min_length=1)
    cron_schedule: str | None = None
    summary_interval_minutes: int | None = Field(default=None, ge=1)


class WeatherDataStore(BaseModel):
    logs: list[WeatherLogEntry] = Field(default_factory=list)
    last_summary: WeatherSummary | None = None
    config: MonitoringConfig = Field(default_factory=MonitoringConfig)
