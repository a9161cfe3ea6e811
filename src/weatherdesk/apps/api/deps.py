from __future__ import annotations

from functools import lru_cache

from weatherdesk.core.cache.ttl import TTLCache
from weatherdesk.core.config import Settings, load_settings
from weatherdesk.core.models.llm_provider import ChatModel
from weatherdesk.core.monitoring.schemas import MonitoringConfig
from weatherdesk.core.monitoring.store import MonitoringStore
from weatherdesk.core.monitoring.summarizer import TrendSummarizer
from weatherdesk.core.orchestration.orchestrator import Orchestrator
from weatherdesk.core.reports.writer import ReportWriter
from weatherdesk.core.scheduler.scheduler import SchedulerService
from weatherdesk.core.tools.registry import ToolRegistry, build_tool_registry
from weatherdesk.core.weather.provider import YandexWeatherClient


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_cache() -> TTLCache:
    return TTLCache(default_ttl_s=get_settings().cache_ttl_s)


@lru_cache(maxsize=1)
def get_weather_client() -> YandexWeatherClient:
    settings = get_settings()
    return YandexWeatherClient(
        api_key=settings.yandex_api_key,
        cache=get_cache(),
        base_url=settings.weather_api_url,
        ttl_s=settings.cache_ttl_s,
    )


@lru_cache(maxsize=1)
def get_report_writer() -> ReportWriter:
    settings = get_settings()
    return ReportWriter(reports_dir=settings.resolved_reports_dir, public_base_url=settings.public_base_url)


@lru_cache(maxsize=1)
def get_chat_model() -> ChatModel:
    return ChatModel.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_tool_registry() -> ToolRegistry:
    return build_tool_registry(get_weather_client(), get_report_writer())


@lru_cache(maxsize=1)
def get_orchestrator() -> Orchestrator:
    settings = get_settings()
    return Orchestrator(
        model=get_chat_model(),
        registry=get_tool_registry(),
        max_round_trips=settings.max_tool_round_trips,
        history_turns=settings.history_turns,
    )


@lru_cache(maxsize=1)
def get_scheduler_service() -> SchedulerService:
    settings = get_settings()
    return SchedulerService(timezone=settings.timezone, test_mode=settings.test_mode)


@lru_cache(maxsize=1)
def get_monitoring_store() -> MonitoringStore:
    settings = get_settings()
    return MonitoringStore(
        file_path=settings.monitoring_data_file,
        max_logs=settings.monitoring_max_logs,
        default_config=MonitoringConfig(
            city=settings.monitoring_city,
            cron_schedule=settings.monitoring_cron,
            summary_interval_minutes=settings.summary_interval_minutes,
        ),
    )


@lru_cache(maxsize=1)
def get_summarizer() -> TrendSummarizer:
    return TrendSummarizer(get_chat_model())


def clear_caches() -> None:
    for getter in (
        get_settings,
        get_cache,
        get_weather_client,
        get_report_writer,
        get_chat_model,
        get_tool_registry,
        get_orchestrator,
        get_scheduler_service,
        get_monitoring_store,
        get_summarizer,
    ):
        getter.cache_clear()
