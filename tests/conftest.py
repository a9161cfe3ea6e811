from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from weatherdesk.apps.api import deps
from weatherdesk.core.weather.schemas import WeatherRecord


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("WEATHERDESK_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("WEATHERDESK_TEST_MODE", "1")
    monkeypatch.setenv("WEATHERDESK_LOG_TO_FILE", "off")
    for name in (
        "WEATHERDESK_CONFIG",
        "WEATHERDESK_LLM_PROVIDER",
        "WEATHERDESK_YANDEX_API_KEY",
        "WEATHERDESK_MONITORING_ENABLED",
        "WEATHERDESK_REPORTS_DIR",
        "YANDEX_WEATHER_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    deps.clear_caches()
    yield
    deps.clear_caches()


@pytest.fixture
def install_transport(monkeypatch: pytest.MonkeyPatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], None]:
    """Route the shared HTTP client through an ``httpx.MockTransport`` handler."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> None:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        monkeypatch.setattr("weatherdesk.core.http.client.get_http_client", lambda: client)
        monkeypatch.setattr("weatherdesk.core.http.client.time.sleep", lambda _: None)

    return install


@pytest.fixture
def moscow_weather() -> WeatherRecord:
    return WeatherRecord(
        temperature=-3,
        condition="небольшой снег",
        humidity=80,
        pressure=745,
        city="Москва",
        feels_like=-8,
        wind_speed=4,
        icon="ovc_-sn",
    )


@pytest.fixture
def yandex_payload() -> Callable[..., dict]:
    def build(temp: float = -3, condition: str = "light-snow") -> dict:
        return {
            "now": 1700000000,
            "fact": {
                "temp": temp,
                "feels_like": temp - 5,
                "condition": condition,
                "humidity": 80,
                "pressure_mm": 745,
                "wind_speed": 4,
                "icon": "ovc_-sn",
            },
        }

    return build
