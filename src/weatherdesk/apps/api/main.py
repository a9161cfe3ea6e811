from __future__ import annotations

import sys
from pathlib import Path
from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse

from weatherdesk.core.config import Settings
from weatherdesk.core.http.client import request_with_retry
from weatherdesk.core.http.errors import WeatherdeskHTTPError
from weatherdesk.core.logging import configure_logging
from weatherdesk.core.logging.context import log_context
from weatherdesk.core.monitoring.jobs import schedule_monitoring
from weatherdesk.core.reports.writer import ReportWriter

from .deps import (
    get_cache,
    get_monitoring_store,
    get_report_writer,
    get_scheduler_service,
    get_settings,
    get_summarizer,
    get_weather_client,
)
from .routes_chat import router as chat_router
from .routes_monitoring import router as monitoring_router
from .routes_weather import router as weather_router

CACHE_SWEEP_JOB_ID = "cache-sweep"
_LLM_PING_TTL_S = 10


def _state_dir_writable(state_dir: Path) -> bool:
    try:
        state_dir.mkdir(parents=True, exist_ok=True)
        probe = state_dir / ".write-check"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
        return True
    except OSError:
        return False


def _llm_base_url(settings: Settings) -> str:
    url = settings.llm_url
    if url.endswith("/v1/chat/completions"):
        return url[: -len("/v1/chat/completions")]
    return url.rstrip("/")


def _llm_reachable_uncached(base_url: str, timeout_s: float = 1.0) -> bool:
    try:
        response = request_with_retry(
            "GET",
            f"{base_url}/v1/models",
            timeout_override=timeout_s,
            retries=0,
            allowed_statuses={200},
            redact_url=True,
        )
        return response.status_code == 200
    except WeatherdeskHTTPError:
        return False


def _llm_reachable(settings: Settings) -> bool:
    if settings.llm_provider == "off":
        return False
    base_url = _llm_base_url(settings)
    cache_key = f"llm_ping:{base_url}"
    return bool(get_cache().get_or_set(cache_key, _LLM_PING_TTL_S, lambda: _llm_reachable_uncached(base_url)))


app = FastAPI(title="Weatherdesk API")

app.include_router(chat_router, prefix="/chat", tags=["chat"])
app.include_router(weather_router, prefix="/api", tags=["weather"])
app.include_router(monitoring_router, prefix="/monitoring", tags=["monitoring"])


@app.middleware("http")
async def request_context_middleware(request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.on_event("startup")
def startup() -> None:
    settings = get_settings()
    configure_logging(settings.state_dir)
    scheduler = get_scheduler_service()
    cache = get_cache()
    scheduler.add_interval(CACHE_SWEEP_JOB_ID, settings.cache_sweep_interval_s, cache.sweep)
    if settings.monitoring_enabled:
        schedule_monitoring(scheduler, get_monitoring_store(), get_weather_client(), get_summarizer())
    scheduler.start()


@app.on_event("shutdown")
def shutdown() -> None:
    get_scheduler_service().shutdown()


@app.get("/reports/{file_name}")
def download_report(file_name: str, writer: ReportWriter = Depends(get_report_writer)) -> FileResponse:
    path = writer.resolve(file_name)
    if path is None:
        raise HTTPException(status_code=404, detail="report not found")
    return FileResponse(path, filename=path.name)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz/full")
def healthz_full() -> dict[str, object]:
    settings = get_settings()
    scheduler = get_scheduler_service()
    state_writable = _state_dir_writable(settings.state_dir)
    weather_key_configured = bool(settings.yandex_api_key)
    job_ids = [job.id for job in scheduler.list_jobs()]

    payload: dict[str, object] = {
        "ok": True,
        "python": {"version": sys.version.split()[0]},
        "state_dir": {"path": str(settings.state_dir), "writable": state_writable},
        "weather": {"api_key_configured": weather_key_configured, "cache_size": get_cache().size},
        "llm": {
            "provider": settings.llm_provider,
            "url": _llm_base_url(settings) if settings.llm_provider != "off" else "",
            "reachable": _llm_reachable(settings),
        },
        "scheduler": {
            "running": scheduler.is_running,
            "test_mode": scheduler.test_mode,
            "jobs": job_ids,
            "monitoring_enabled": settings.monitoring_enabled,
        },
    }

    if not state_writable or not weather_key_configured:
        payload["ok"] = False
    return payload


def run() -> None:
    uvicorn.run("weatherdesk.apps.api.main:app", host="127.0.0.1", port=8000)
