from __future__ import annotations

from pydantic import BaseModel, Field


class JobInfo(BaseModel):
    id: str
    next_run_time_iso: str | None
    trigger: str
    kwargs: dict = Field(default_factory=dict)
