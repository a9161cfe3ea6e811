from __future__ import annotations

from weatherdesk.core.models.llm_provider import LLMUnavailable
from weatherdesk.core.monitoring.schemas import WeatherLogEntry
from weatherdesk.core.monitoring.summarizer import NOT_ENOUGH_DATA, TrendSummarizer, statistical_summary


def _logs(*temperatures: float) -> list[WeatherLogEntry]:
    return [
        WeatherLogEntry(
            timestamp=f"2024-03-01T{idx:02d}:00:00+00:00",
            city="Рига",
            temperature=value,
            condition="пасмурно" if idx < len(temperatures) - 1 else "ясно",
            humidity=70,
            pressure=755,
        )
        for idx, value in enumerate(temperatures)
    ]


class FakeLLM:
    def __init__(self, reply: str | None = None) -> None:
        self.reply = reply
        self.prompts: list[tuple[str, str]] = []

    def complete_text(self, system: str, user: str, max_tokens: int | None = None) -> str:
        self.prompts.append((system, user))
        if self.reply is None:
            raise LLMUnavailable("LLM provider is off")
        return self.reply


def test_statistical_summary_reports_range_average_and_trend() -> None:
    text = statistical_summary(_logs(2.0, 4.0, 6.0))

    assert text == (
        "За последние 24 часа температура: от 2.0°C до 6.0°C (средняя: 4.0°C). "
        "Тенденция: потепление. Условия: ясно."
    )


def test_trend_cooling_and_stable() -> None:
    assert "похолодание" in statistical_summary(_logs(6.0, 1.0))
    assert "стабильность" in statistical_summary(_logs(3.0, 3.5))


def test_no_logs_gives_not_enough_data() -> None:
    llm = FakeLLM(reply="unused")

    assert TrendSummarizer(llm).summarize([]) == NOT_ENOUGH_DATA
    assert llm.prompts == []


def test_llm_text_is_used_when_available() -> None:
    llm = FakeLLM(reply="  Температура росла весь день.  ")

    text = TrendSummarizer(llm).summarize(_logs(1.0, 2.0))

    assert text == "Температура росла весь день."
    assert "Рига" in llm.prompts[0][1]


def test_falls_back_to_statistics_when_llm_unavailable() -> None:
    logs = _logs(1.0, 5.0)

    assert TrendSummarizer(FakeLLM()).summarize(logs) == statistical_summary(logs)
