from __future__ import annotations

import logging
import time

from weatherdesk.core.cache.ttl import TTLCache
from weatherdesk.core.http import WeatherdeskHTTPNetworkError, WeatherdeskHTTPStatusError, request_with_retry

from .cities import find_city
from .errors import (
    ApiUnavailableError,
    CityNotFoundError,
    RateLimitError,
    WeatherApiError,
    WeatherAuthError,
    WeatherConfigError,
)
from .schemas import WeatherRecord

logger = logging.getLogger("weatherdesk.weather")

DEFAULT_BASE_URL = "https://api.weather.yandex.ru/v2/forecast"

CONDITION_TEXT: dict[str, str] = {
    "clear": "ясно",
    "partly-cloudy": "малооблачно",
    "cloudy": "облачно с прояснениями",
    "overcast": "пасмурно",
    "drizzle": "морось",
    "light-rain": "небольшой дождь",
    "rain": "дождь",
    "moderate-rain": "умеренный дождь",
    "heavy-rain": "сильный дождь",
    "continuous-heavy-rain": "длительный сильный дождь",
    "showers": "ливень",
    "wet-snow": "дождь со снегом",
    "light-snow": "небольшой снег",
    "snow": "снег",
    "snow-showers": "снегопад",
    "hail": "град",
    "thunderstorm": "гроза",
    "thunderstorm-with-rain": "дождь с грозой",
    "thunderstorm-with-hail": "гроза с градом",
}


def translate_condition(code: str) -> str:
    return CONDITION_TEXT.get(code, code)


class YandexWeatherClient:
    def __init__(
        self,
        api_key: str | None,
        cache: TTLCache,
        base_url: str = DEFAULT_BASE_URL,
        ttl_s: float | None = None,
    ) -> None:
        self.api_key = api_key
        self.cache = cache
        self.base_url = base_url
        self.ttl_s = ttl_s

    def fetch_weather(self, city: str) -> WeatherRecord:
        coordinates = find_city(city)
        if coordinates is None:
            raise CityNotFoundError(city)

        cache_key = f"weather:{coordinates.lat}:{coordinates.lon}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, WeatherRecord):
            return cached

        if not self.api_key:
            raise WeatherConfigError()

        start = time.perf_counter()
        try:
            response = request_with_retry(
                "GET",
                self.base_url,
                headers={"X-Yandex-Weather-Key": self.api_key},
                params={"lat": coordinates.lat, "lon": coordinates.lon, "lang": "ru_RU", "limit": 1},
            )
        except WeatherdeskHTTPStatusError as exc:
            raise self._status_error(exc.status_code) from exc
        except WeatherdeskHTTPNetworkError as exc:
            raise ApiUnavailableError() from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise WeatherApiError("Некорректный ответ API погоды") from exc
        record = self._parse(payload, coordinates.name)

        self.cache.set(cache_key, record, self.ttl_s)
        logger.info(
            "weather_fetched",
            extra={
                "extra_fields": {
                    "city": coordinates.name,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                }
            },
        )
        return record

    @staticmethod
    def _status_error(status_code: int | None) -> WeatherApiError:
        if status_code == 429:
            return RateLimitError()
        if status_code in {401, 403}:
            return WeatherAuthError()
        if status_code is not None and status_code >= 500:
            return ApiUnavailableError()
        return WeatherApiError(f"Ошибка API погоды: HTTP {status_code}", "API_ERROR", status_code)

    @staticmethod
    def _parse(payload: object, city: str) -> WeatherRecord:
        fact = payload.get("fact") if isinstance(payload, dict) else None
        if not isinstance(fact, dict):
            raise WeatherApiError("Некорректный ответ API погоды")
        try:
            return WeatherRecord(
                temperature=fact["temp"],
                condition=translate_condition(str(fact.get("condition", ""))),
                humidity=fact["humidity"],
                pressure=fact["pressure_mm"],
                city=city,
                feels_like=fact.get("feels_like"),
                wind_speed=fact.get("wind_speed"),
                icon=fact.get("icon"),
            )
        except (KeyError, ValueError) as exc:
            raise WeatherApiError("Некорректный ответ API погоды") from exc


def format_weather_text(record: WeatherRecord) -> str:
    lines = [
        f"Погода в городе {record.city}:",
        f"Температура: {record.temperature:g}°C",
    ]
    if record.feels_like is not None:
        lines.append(f"Ощущается как: {record.feels_like:g}°C")
    lines.extend(
        [
            f"Условия: {record.condition}",
            f"Влажность: {record.humidity:g}%",
            f"Давление: {record.pressure:g} мм рт. ст.",
        ]
    )
    if record.wind_speed is not None:
        lines.append(f"Скорость ветра: {record.wind_speed:g} м/с")
    return "\n".join(lines)
