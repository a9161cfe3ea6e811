from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class WeatherRecord(BaseModel):
    temperature: float
    condition: str
    humidity: float
    pressure: float = Field(description="Pressure in mm Hg")
    city: str
    feels_like: float | None = None
    wind_speed: float | None = None
    icon: str | None = None


@dataclass(frozen=True)
class CityCoordinates:
    name: str
    lat: float
    lon: float
