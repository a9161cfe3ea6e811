from __future__ import annotations

from pydantic import BaseModel, Field

from weatherdesk.core.analysis.schemas import WeatherAnalysis
from weatherdesk.core.reports.schemas import ReportDescriptor, ReportFormat
from weatherdesk.core.reports.writer import ReportWriter
from weatherdesk.core.weather.schemas import WeatherRecord


class SaveReportArgs(BaseModel):
    city: str = Field(min_length=1)
    weather_data: WeatherRecord
    analysis: WeatherAnalysis
    format: ReportFormat = "txt"


class SaveReportTool:
    name = "save_weather_report"
    description = "Сохранить отчёт с погодой и анализом в файл формата txt, json или md."
    artifact = "report"
    invalid_arguments_message = "Ошибка: некорректные данные для сохранения отчёта"
    Args = SaveReportArgs

    def __init__(self, writer: ReportWriter) -> None:
        self.writer = writer

    def run(self, args: SaveReportArgs) -> ReportDescriptor:
        return self.writer.write_report(args.city, args.weather_data, args.analysis, args.format)
