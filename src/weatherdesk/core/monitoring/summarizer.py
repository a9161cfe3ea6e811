from __future__ import annotations

import logging
from datetime import datetime, timezone

from weatherdesk.core.models.llm_provider import ChatModel, LLMUnavailable
from weatherdesk.core.models.prompts import SUMMARY_SYSTEM_PROMPT, summary_user_prompt

from .schemas import SummaryPeriod, WeatherLogEntry, WeatherSummary

logger = logging.getLogger("weatherdesk.monitoring")

NOT_ENOUGH_DATA = "Недостаточно данных для анализа."
_TREND_THRESHOLD = 1.0


def _trend(logs: list[WeatherLogEntry]) -> str:
    delta = logs[-1].temperature - logs[0].temperature
    if delta > _TREND_THRESHOLD:
        return "потепление"
    if delta < -_TREND_THRESHOLD:
        return "похолодание"
    return "стабильность"


def statistical_summary(logs: list[WeatherLogEntry]) -> str:
    if not logs:
        return NOT_ENOUGH_DATA
    temperatures = [entry.temperature for entry in logs]
    average = sum(temperatures) / len(temperatures)
    return (
        f"За последние 24 часа температура: от {min(temperatures):.1f}°C до {max(temperatures):.1f}°C "
        f"(средняя: {average:.1f}°C). Тенденция: {_trend(logs)}. Условия: {logs[-1].condition}."
    )


class TrendSummarizer:
    def __init__(self, llm: ChatModel | None = None) -> None:
        self.llm = llm

    def summarize(self, logs: list[WeatherLogEntry]) -> str:
        if not logs:
            return NOT_ENOUGH_DATA
        if self.llm is None:
            return statistical_summary(logs)

        entries = [
            {
                "time": entry.timestamp,
                "temperature": entry.temperature,
                "condition": entry.condition,
                "humidity": entry.humidity,
                "pressure": entry.pressure,
            }
            for entry in logs
        ]
        try:
            text = self.llm.complete_text(SUMMARY_SYSTEM_PROMPT, summary_user_prompt(logs[-1].city, entries))
        except LLMUnavailable as exc:
            logger.info("summary_fallback", extra={"extra_fields": {"reason": str(exc), "entries": len(logs)}})
            return statistical_summary(logs)
        return text.strip() or statistical_summary(logs)


def build_summary(logs: list[WeatherLogEntry], text: str, now: datetime | None = None) -> WeatherSummary:
    generated_at = (now or datetime.now(timezone.utc)).isoformat()
    return WeatherSummary(
        text=text,
        generated_at=generated_at,
        period=SummaryPeriod(start=logs[0].timestamp if logs else generated_at, end=logs[-1].timestamp if logs else generated_at),
        entries_count=len(logs),
    )
