from __future__ import annotations

import logging
import signal
import time

from weatherdesk.core.cache.ttl import TTLCache
from weatherdesk.core.config import Settings, load_settings
from weatherdesk.core.logging import configure_logging
from weatherdesk.core.models.llm_provider import ChatModel
from weatherdesk.core.monitoring.jobs import run_weather_task, schedule_monitoring
from weatherdesk.core.monitoring.schemas import MonitoringConfig
from weatherdesk.core.monitoring.store import MonitoringStore
from weatherdesk.core.monitoring.summarizer import TrendSummarizer
from weatherdesk.core.scheduler.scheduler import SchedulerService
from weatherdesk.core.weather.provider import YandexWeatherClient

logger = logging.getLogger("weatherdesk.worker")


class Worker:
    """Standalone monitoring process: polls on the stored cron schedule until SIGINT/SIGTERM."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or load_settings()
        configure_logging(self.settings.state_dir)
        self.cache = TTLCache(default_ttl_s=self.settings.cache_ttl_s)
        self.scheduler = SchedulerService(timezone=self.settings.timezone, test_mode=self.settings.test_mode)
        self.provider = YandexWeatherClient(
            api_key=self.settings.yandex_api_key,
            cache=self.cache,
            base_url=self.settings.weather_api_url,
            ttl_s=self.settings.cache_ttl_s,
        )
        self.store = MonitoringStore(
            file_path=self.settings.monitoring_data_file,
            max_logs=self.settings.monitoring_max_logs,
            default_config=MonitoringConfig(
                city=self.settings.monitoring_city,
                cron_schedule=self.settings.monitoring_cron,
                summary_interval_minutes=self.settings.summary_interval_minutes,
            ),
        )
        self.summarizer = TrendSummarizer(ChatModel.from_settings(self.settings))
        self._running = True

    def schedule_jobs(self) -> None:
        self.scheduler.add_interval("cache-sweep", self.settings.cache_sweep_interval_s, self.cache.sweep)
        schedule_monitoring(self.scheduler, self.store, self.provider, self.summarizer)

    def _handle_signal(self, signum, frame) -> None:  # type: ignore[no-untyped-def]
        _ = frame
        logger.info("worker_signal", extra={"extra_fields": {"signal": signum}})
        self._running = False

    def run_forever(self) -> None:
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)
        self.schedule_jobs()
        # first reading right away instead of waiting for the next cron tick
        run_weather_task(self.store, self.provider, self.summarizer)
        self.scheduler.start()
        logger.info("worker_started", extra={"extra_fields": {"city": self.store.get_config().city}})
        try:
            while self._running:
                time.sleep(0.5)
        finally:
            self.scheduler.shutdown()
            logger.info("worker_stopped")


def run() -> None:
    Worker().run_forever()


if __name__ == "__main__":
    run()
