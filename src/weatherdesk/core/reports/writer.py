from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

from weatherdesk.core.analysis.analyzer import format_analysis_text
from weatherdesk.core.analysis.schemas import WeatherAnalysis
from weatherdesk.core.weather.provider import format_weather_text
from weatherdesk.core.weather.schemas import WeatherRecord

from .schemas import ReportDescriptor

logger = logging.getLogger("weatherdesk.reports")

REPORT_FORMATS = ("txt", "json", "md")
_SLUG_RE = re.compile(r"[^\w-]+")
_MAX_NAME_ATTEMPTS = 100


def _slug(city: str) -> str:
    slug = _SLUG_RE.sub("_", city.strip().casefold()).strip("_")
    return slug or "city"


class ReportWriter:
    def __init__(self, reports_dir: Path, public_base_url: str) -> None:
        self.reports_dir = Path(reports_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def render(
        self,
        city: str,
        weather: WeatherRecord,
        analysis: WeatherAnalysis | None,
        fmt: str,
        generated_at: datetime | None = None,
    ) -> str:
        generated = (generated_at or datetime.now()).isoformat(timespec="seconds")
        if fmt == "json":
            payload = {
                "city": city,
                "generated_at": generated,
                "weather": weather.model_dump(),
                "analysis": analysis.model_dump() if analysis is not None else None,
            }
            return json.dumps(payload, ensure_ascii=False, indent=2)
        if fmt == "md":
            return self._render_markdown(city, weather, analysis, generated)
        if fmt == "txt":
            sections = [f"Отчёт о погоде: {city}", f"Создан: {generated}", "", format_weather_text(weather)]
            if analysis is not None:
                sections.extend(["", format_analysis_text(analysis)])
            return "\n".join(sections) + "\n"
        raise ValueError(f"unsupported report format: {fmt}")

    def _render_markdown(self, city: str, weather: WeatherRecord, analysis: WeatherAnalysis | None, generated: str) -> str:
        lines = [
            f"# Отчёт о погоде: {city}",
            "",
            f"_Создан: {generated}_",
            "",
            "## Текущая погода",
            "",
            "| Параметр | Значение |",
            "| --- | --- |",
            f"| Температура | {weather.temperature:g}°C |",
        ]
        if weather.feels_like is not None:
            lines.append(f"| Ощущается как | {weather.feels_like:g}°C |")
        lines.extend(
            [
                f"| Условия | {weather.condition} |",
                f"| Влажность | {weather.humidity:g}% |",
                f"| Давление | {weather.pressure:g} мм рт. ст. |",
            ]
        )
        if weather.wind_speed is not None:
            lines.append(f"| Ветер | {weather.wind_speed:g} м/с |")

        if analysis is not None:
            lines.extend(["", f"## Анализ ({analysis.type})", "", analysis.summary, ""])
            if analysis.clothing is not None:
                lines.append(f"**{analysis.clothing.main}**")
                lines.extend(f"- {item}" for item in analysis.clothing.items + analysis.clothing.extras)
            if analysis.activity is not None:
                lines.extend(f"- ✅ {item}" for item in analysis.activity.suitable)
                lines.extend(f"- ❌ {item}" for item in analysis.activity.avoid)
                lines.extend(f"- {tip}" for tip in analysis.activity.tips)
            if analysis.health is not None:
                lines.append(f"Уровень риска: **{analysis.health.risk_level}**")
                lines.extend(f"- ⚠️ {warning}" for warning in analysis.health.warnings)
                lines.extend(f"- {tip}" for tip in analysis.health.tips)
        return "\n".join(lines) + "\n"

    def write_report(
        self,
        city: str,
        weather: WeatherRecord,
        analysis: WeatherAnalysis | None,
        fmt: str = "txt",
        now: datetime | None = None,
    ) -> ReportDescriptor:
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"unsupported report format: {fmt}")
        generated_at = now or datetime.now()
        content = self.render(city, weather, analysis, fmt, generated_at=generated_at)

        self.reports_dir.mkdir(parents=True, exist_ok=True)
        file_path = self._create(f"weather_report_{_slug(city)}_{generated_at.strftime('%Y%m%d_%H%M%S')}", fmt, content)
        file_name = file_path.name
        file_size = file_path.stat().st_size

        logger.info(
            "report_written",
            extra={"extra_fields": {"file_name": file_name, "format": fmt, "file_size": file_size}},
        )
        return ReportDescriptor(
            file_path=str(file_path),
            file_url=f"{self.public_base_url}/reports/{quote(file_name)}",
            file_name=file_name,
            file_size=file_size,
            format=fmt,
            timestamp=generated_at.isoformat(timespec="seconds"),
        )

    def _create(self, stem: str, fmt: str, content: str) -> Path:
        # reports written within the same second get a numeric suffix instead of overwriting
        for attempt in range(1, _MAX_NAME_ATTEMPTS + 1):
            suffix = "" if attempt == 1 else f"_{attempt}"
            file_path = self.reports_dir / f"{stem}{suffix}.{fmt}"
            try:
                with file_path.open("x", encoding="utf-8") as f:
                    f.write(content)
            except FileExistsError:
                continue
            return file_path
        raise FileExistsError(f"no free report name for {stem}.{fmt}")

    def resolve(self, file_name: str) -> Path | None:
        """Path of an existing report inside ``reports_dir``; ``None`` for anything else."""
        if not file_name or file_name != Path(file_name).name:
            return None
        candidate = self.reports_dir / file_name
        if not candidate.is_file():
            return None
        return candidate
