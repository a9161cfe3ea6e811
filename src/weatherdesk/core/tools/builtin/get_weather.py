from __future__ import annotations

from pydantic import BaseModel, Field

from weatherdesk.core.weather.cities import normalize_city
from weatherdesk.core.weather.provider import YandexWeatherClient
from weatherdesk.core.weather.schemas import WeatherRecord


class GetWeatherArgs(BaseModel):
    city: str = Field(min_length=1, description="Название города, например «Москва»")


class GetWeatherTool:
    name = "get_weather"
    description = "Получить текущую погоду в городе: температуру, условия, влажность, давление и ветер."
    artifact = "weather"
    invalid_arguments_message = "Ошибка: не указан город"
    Args = GetWeatherArgs

    def __init__(self, provider: YandexWeatherClient) -> None:
        self.provider = provider

    def run(self, args: GetWeatherArgs) -> WeatherRecord:
        return self.provider.fetch_weather(normalize_city(args.city))
