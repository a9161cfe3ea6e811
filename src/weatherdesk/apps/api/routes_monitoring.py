from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from weatherdesk.core.monitoring.jobs import (
    MONITORING_JOB_ID,
    next_summary_due,
    refresh_summary,
    run_weather_task,
    schedule_monitoring,
)
from weatherdesk.core.monitoring.schemas import MonitoringConfig, MonitoringConfigUpdate
from weatherdesk.core.monitoring.store import MonitoringStore
from weatherdesk.core.monitoring.summarizer import TrendSummarizer
from weatherdesk.core.scheduler.scheduler import SchedulerService
from weatherdesk.core.scheduler.schemas import JobInfo
from weatherdesk.core.weather.provider import YandexWeatherClient

from .deps import get_monitoring_store, get_scheduler_service, get_summarizer, get_weather_client

router = APIRouter()


@router.get("/current")
def current(store: MonitoringStore = Depends(get_monitoring_store)) -> dict[str, object]:
    entry = store.latest()
    if entry is None:
        raise HTTPException(status_code=404, detail="no readings yet")
    return entry.model_dump()


@router.get("/history")
def history(
    hours: float = Query(default=24, gt=0, le=24 * 7),
    store: MonitoringStore = Depends(get_monitoring_store),
) -> dict[str, object]:
    logs = store.logs_for_period(hours)
    return {"hours": hours, "count": len(logs), "logs": [entry.model_dump() for entry in logs]}


@router.get("/summary")
def get_summary(store: MonitoringStore = Depends(get_monitoring_store)) -> dict[str, object]:
    summary = store.last_summary()
    if summary is None:
        raise HTTPException(status_code=404, detail="no summary yet")
    due = next_summary_due(store)
    return {"summary": summary.model_dump(by_alias=True), "next_update": due.isoformat() if due else None}


@router.post("/summary")
def create_summary(
    store: MonitoringStore = Depends(get_monitoring_store),
    summarizer: TrendSummarizer = Depends(get_summarizer),
) -> dict[str, object]:
    summary = refresh_summary(store, summarizer)
    return {"summary": summary.model_dump(by_alias=True)}


@router.post("/trigger")
def trigger(
    store: MonitoringStore = Depends(get_monitoring_store),
    provider: YandexWeatherClient = Depends(get_weather_client),
    summarizer: TrendSummarizer = Depends(get_summarizer),
) -> dict[str, object]:
    entry = run_weather_task(store, provider, summarizer, job_id=f"{MONITORING_JOB_ID}:manual")
    if entry is None:
        raise HTTPException(status_code=502, detail="weather poll failed")
    return entry.model_dump()


@router.get("/jobs", response_model=list[JobInfo])
def jobs(scheduler: SchedulerService = Depends(get_scheduler_service)) -> list[JobInfo]:
    return scheduler.list_jobs()


@router.get("/config", response_model=MonitoringConfig)
def get_config(store: MonitoringStore = Depends(get_monitoring_store)) -> MonitoringConfig:
    return store.get_config()


@router.put("/config", response_model=MonitoringConfig)
def update_config(
    update: MonitoringConfigUpdate,
    store: MonitoringStore = Depends(get_monitoring_store),
    scheduler: SchedulerService = Depends(get_scheduler_service),
    provider: YandexWeatherClient = Depends(get_weather_client),
    summarizer: TrendSummarizer = Depends(get_summarizer),
) -> MonitoringConfig:
    if update.cron_schedule is not None:
        try:
            scheduler.validate_crontab(update.cron_schedule)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"invalid cron expression: {exc}") from exc
    config = store.update_config(update)
    if update.cron_schedule is not None and any(job.id == MONITORING_JOB_ID for job in scheduler.list_jobs()):
        schedule_monitoring(scheduler, store, provider, summarizer)
    return config
