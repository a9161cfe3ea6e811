from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from weatherdesk.core.logging.context import log_context
from weatherdesk.core.scheduler.scheduler import SchedulerService
from weatherdesk.core.weather.errors import WeatherApiError
from weatherdesk.core.weather.provider import YandexWeatherClient

from .schemas import WeatherLogEntry, WeatherSummary
from .store import MonitoringStore
from .summarizer import TrendSummarizer, build_summary

logger = logging.getLogger("weatherdesk.monitoring")

MONITORING_JOB_ID = "weather-monitoring"
SUMMARY_WINDOW_HOURS = 24


def refresh_summary(store: MonitoringStore, summarizer: TrendSummarizer, now: datetime | None = None) -> WeatherSummary:
    current = now or datetime.now(timezone.utc)
    logs = store.logs_for_period(SUMMARY_WINDOW_HOURS, now=current)
    summary = build_summary(logs, summarizer.summarize(logs), now=current)
    store.save_summary(summary)
    logger.info("summary_generated", extra={"extra_fields": {"entries_count": summary.entries_count}})
    return summary


def run_weather_task(
    store: MonitoringStore,
    provider: YandexWeatherClient,
    summarizer: TrendSummarizer,
    job_id: str = MONITORING_JOB_ID,
    now: datetime | None = None,
) -> WeatherLogEntry | None:
    """One polling pass: fetch, append a reading, summarize when due.

    Failures are logged and ``None`` is returned so the schedule keeps running.
    """
    with log_context(correlation_id=str(uuid4()), job_id=job_id):
        current = now or datetime.now(timezone.utc)
        config = store.get_config()
        logger.info("monitoring_poll_started", extra={"extra_fields": {"city": config.city}})
        try:
            record = provider.fetch_weather(config.city)
            entry = store.add_log(WeatherLogEntry.from_record(record, timestamp=current.isoformat()))
            if store.needs_new_summary(now=current):
                refresh_summary(store, summarizer, now=current)
        except (WeatherApiError, OSError, ValueError):
            logger.exception("monitoring_poll_failed", extra={"extra_fields": {"city": config.city}})
            return None
        logger.info(
            "monitoring_poll_completed",
            extra={"extra_fields": {"city": entry.city, "temperature": entry.temperature}},
        )
        return entry


def next_summary_due(store: MonitoringStore) -> datetime | None:
    summary = store.last_summary()
    if summary is None:
        return None
    generated = datetime.fromisoformat(summary.generated_at)
    return generated + timedelta(minutes=store.get_config().summary_interval_minutes)


def schedule_monitoring(
    scheduler: SchedulerService,
    store: MonitoringStore,
    provider: YandexWeatherClient,
    summarizer: TrendSummarizer,
) -> str:
    """(Re)register the polling job from the stored cron expression; returns the expression."""
    cron_schedule = store.get_config().cron_schedule
    scheduler.add_crontab(
        job_id=MONITORING_JOB_ID,
        expr=cron_schedule,
        func=run_weather_task,
        kwargs={"store": store, "provider": provider, "summarizer": summarizer, "job_id": MONITORING_JOB_ID},
    )
    logger.info("monitoring_scheduled", extra={"extra_fields": {"cron": cron_schedule}})
    return cron_schedule
