from __future__ import annotations

from pydantic import BaseModel

from weatherdesk.core.analysis.analyzer import analyze_weather
from weatherdesk.core.analysis.schemas import AnalysisType, WeatherAnalysis
from weatherdesk.core.weather.schemas import WeatherRecord


class AnalyzeWeatherArgs(BaseModel):
    weather_data: WeatherRecord
    analysis_type: AnalysisType


class AnalyzeWeatherTool:
    name = "analyze_weather"
    description = (
        "Проанализировать данные о погоде, полученные от get_weather, и дать рекомендации: "
        "clothing (одежда), activity (активности) или health (здоровье)."
    )
    artifact = "analysis"
    invalid_arguments_message = "Ошибка: некорректные данные для анализа погоды"
    Args = AnalyzeWeatherArgs

    def run(self, args: AnalyzeWeatherArgs) -> WeatherAnalysis:
        return analyze_weather(args.weather_data, args.analysis_type)
