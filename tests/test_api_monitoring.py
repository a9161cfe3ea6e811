from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from weatherdesk.apps.api import deps
from weatherdesk.apps.api.main import app
from weatherdesk.core.monitoring.schemas import WeatherLogEntry
from weatherdesk.core.monitoring.summarizer import NOT_ENOUGH_DATA


def test_current_without_readings_is_404() -> None:
    with TestClient(app) as client:
        response = client.get("/monitoring/current")

    assert response.status_code == 404


def test_trigger_polls_and_stores_reading(install_transport, yandex_payload, monkeypatch) -> None:
    monkeypatch.setenv("WEATHERDESK_YANDEX_API_KEY", "secret")
    monkeypatch.setenv("WEATHERDESK_MONITORING_CITY", "Москва")
    install_transport(lambda request: httpx.Response(200, request=request, json=yandex_payload(temp=-7)))

    with TestClient(app) as client:
        triggered = client.post("/monitoring/trigger")
        current = client.get("/monitoring/current")
        history = client.get("/monitoring/history", params={"hours": 24})
        summary = client.get("/monitoring/summary")

    assert triggered.status_code == 200
    assert triggered.json()["city"] == "Москва"
    assert current.json()["temperature"] == -7
    assert history.json()["count"] == 1
    assert summary.status_code == 200
    assert summary.json()["summary"]["entries_count"] == 1
    assert "from" in summary.json()["summary"]["period"]


def test_trigger_failure_is_502() -> None:
    with TestClient(app) as client:
        response = client.post("/monitoring/trigger")

    assert response.status_code == 502


def test_post_summary_without_logs_uses_fixed_text() -> None:
    with TestClient(app) as client:
        response = client.post("/monitoring/summary")

    assert response.status_code == 200
    assert response.json()["summary"]["text"] == NOT_ENOUGH_DATA


def test_post_summary_uses_recent_logs() -> None:
    store = deps.get_monitoring_store()
    store.add_log(
        WeatherLogEntry(
            timestamp="2999-01-01T00:00:00+00:00",
            city="Рига",
            temperature=5,
            condition="ясно",
            humidity=60,
            pressure=760,
        )
    )

    with TestClient(app) as client:
        response = client.post("/monitoring/summary")

    assert response.json()["summary"]["entries_count"] == 1


def test_history_rejects_out_of_range_hours() -> None:
    with TestClient(app) as client:
        response = client.get("/monitoring/history", params={"hours": 0})

    assert response.status_code == 422


def test_jobs_lists_cache_sweep_and_monitoring(monkeypatch) -> None:
    monkeypatch.setenv("WEATHERDESK_MONITORING_ENABLED", "true")

    with TestClient(app) as client:
        response = client.get("/monitoring/jobs")

    ids = {job["id"] for job in response.json()}
    assert ids == {"cache-sweep", "weather-monitoring"}


def test_update_config_validates_cron_and_persists() -> None:
    with TestClient(app) as client:
        bad = client.put("/monitoring/config", json={"cron_schedule": "not a cron"})
        good = client.put("/monitoring/config", json={"city": "Таллин", "cron_schedule": "0 * * * *"})
        current = client.get("/monitoring/config")

    assert bad.status_code == 400
    assert good.status_code == 200
    assert current.json() == {"city": "Таллин", "cron_schedule": "0 * * * *", "summary_interval_minutes": 60}
