from __future__ import annotations

import logging
from typing import Any, Callable
from zoneinfo import ZoneInfo

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .schemas import JobInfo

logger = logging.getLogger("weatherdesk.scheduler")


class SchedulerService:
    def __init__(self, timezone: str = "Europe/Riga", test_mode: bool = False) -> None:
        self.test_mode = test_mode
        self.timezone = ZoneInfo(timezone)
        self.scheduler = BackgroundScheduler(
            jobstores={"default": MemoryJobStore()},
            timezone=self.timezone,
        )
        self._started = False

    @property
    def is_running(self) -> bool:
        return self._started

    def start(self) -> None:
        if self.test_mode or self._started:
            return
        self.scheduler.start()
        self._started = True
        logger.info("scheduler_started", extra={"extra_fields": {"job_count": len(self.scheduler.get_jobs())}})

    def shutdown(self) -> None:
        if self._started:
            self.scheduler.shutdown(wait=False)
            self._started = False
            logger.info("scheduler_stopped")

    def list_jobs(self) -> list[JobInfo]:
        jobs: list[JobInfo] = []
        for job in self.scheduler.get_jobs():
            try:
                next_run_time = job.next_run_time
            except AttributeError:
                next_run_time = None
            jobs.append(
                JobInfo(
                    id=job.id,
                    next_run_time_iso=next_run_time.isoformat() if next_run_time else None,
                    trigger=str(job.trigger),
                    kwargs={key: str(value) for key, value in job.kwargs.items()},
                )
            )
        return jobs

    def add_interval(self, job_id: str, seconds: float, func: Callable[..., Any], kwargs: dict[str, Any] | None = None) -> None:
        self.scheduler.add_job(
            func,
            trigger="interval",
            id=job_id,
            seconds=seconds,
            kwargs=kwargs or {},
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )

    def validate_crontab(self, expr: str) -> CronTrigger:
        return CronTrigger.from_crontab(expr, timezone=self.timezone)

    def add_crontab(self, job_id: str, expr: str, func: Callable[..., Any], kwargs: dict[str, Any] | None = None) -> None:
        """Schedule ``func`` with a five-field crontab expression; invalid expressions raise ``ValueError``."""
        trigger = self.validate_crontab(expr)
        self.scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            kwargs=kwargs or {},
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )

    def remove_job(self, job_id: str) -> None:
        self.scheduler.remove_job(job_id)
