from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from weatherdesk.core.analysis.analyzer import analyze_weather
from weatherdesk.core.analysis.schemas import AnalysisType, WeatherAnalysis
from weatherdesk.core.reports.schemas import ReportFormat
from weatherdesk.core.reports.writer import ReportWriter
from weatherdesk.core.weather.cities import list_cities, normalize_city
from weatherdesk.core.weather.errors import WeatherApiError
from weatherdesk.core.weather.provider import YandexWeatherClient, format_weather_text
from weatherdesk.core.weather.schemas import WeatherRecord

from .deps import get_report_writer, get_weather_client

router = APIRouter()


class WeatherQuery(BaseModel):
    city: str = Field(min_length=1)


class AnalyzeBody(BaseModel):
    weather_data: WeatherRecord
    analysis_type: AnalysisType = "clothing"


class SaveReportBody(BaseModel):
    city: str = Field(min_length=1)
    weather_data: WeatherRecord
    analysis: WeatherAnalysis | None = None
    format: ReportFormat = "txt"


class ToolChainBody(BaseModel):
    city: str = Field(min_length=1)
    analysis_type: AnalysisType = "clothing"
    format: ReportFormat = "txt"


def _weather_http_error(exc: WeatherApiError) -> HTTPException:
    return HTTPException(status_code=exc.status_code or 502, detail={"code": exc.code, "message": exc.message})


def _fetch(city: str, client: YandexWeatherClient) -> dict[str, object]:
    try:
        record = client.fetch_weather(normalize_city(city))
    except WeatherApiError as exc:
        raise _weather_http_error(exc) from exc
    return {"data": record.model_dump(), "text": format_weather_text(record)}


@router.get("/weather")
def get_weather(
    city: str = Query(min_length=1),
    client: YandexWeatherClient = Depends(get_weather_client),
) -> dict[str, object]:
    return _fetch(city, client)


@router.post("/weather")
def post_weather(body: WeatherQuery, client: YandexWeatherClient = Depends(get_weather_client)) -> dict[str, object]:
    return _fetch(body.city, client)


@router.post("/analyze")
def analyze(body: AnalyzeBody) -> dict[str, object]:
    return analyze_weather(body.weather_data, body.analysis_type).model_dump()


@router.post("/save-report")
def save_report(body: SaveReportBody, writer: ReportWriter = Depends(get_report_writer)) -> dict[str, object]:
    try:
        descriptor = writer.write_report(body.city, body.weather_data, body.analysis, body.format)
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"report write failed: {exc}") from exc
    return descriptor.model_dump()


@router.post("/tool-chain")
def tool_chain(
    body: ToolChainBody,
    client: YandexWeatherClient = Depends(get_weather_client),
    writer: ReportWriter = Depends(get_report_writer),
) -> dict[str, object]:
    """Weather, analysis and report in one call; later steps are skipped when an earlier one fails."""
    city = normalize_city(body.city)
    result: dict[str, object] = {"city": city, "weather": None, "analysis": None, "report": None, "errors": []}
    errors: list[str] = result["errors"]

    try:
        weather = client.fetch_weather(city)
    except WeatherApiError as exc:
        errors.append(f"weather: {exc.message}")
        return result
    result["weather"] = weather.model_dump()

    analysis = analyze_weather(weather, body.analysis_type)
    result["analysis"] = analysis.model_dump()

    try:
        descriptor = writer.write_report(city, weather, analysis, body.format)
    except OSError as exc:
        errors.append(f"report: {exc}")
        return result
    result["report"] = descriptor.model_dump()
    return result


@router.get("/cities")
def cities() -> dict[str, list[str]]:
    return {"cities": list_cities()}
