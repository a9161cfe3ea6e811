from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from weatherdesk.core.analysis.schemas import WeatherAnalysis
from weatherdesk.core.reports.schemas import ReportDescriptor
from weatherdesk.core.weather.schemas import WeatherRecord


class ToolResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tool_call_id: str
    name: str
    ok: bool
    content: str
    data: dict[str, Any] | None = None

    def to_message(self) -> dict[str, Any]:
        return {"role": "tool", "tool_call_id": self.tool_call_id, "content": self.content}


class HistoryMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


@dataclass
class ChatRequest:
    message: str
    history: list[HistoryMessage] = field(default_factory=list)


@dataclass
class OrchestrationResult:
    final_response: str
    weather: WeatherRecord | None = None
    analysis: WeatherAnalysis | None = None
    report: ReportDescriptor | None = None
    tool_results: list[ToolResult] = field(default_factory=list)
    round_trips: int = 0
    trace_events: list[dict[str, Any]] = field(default_factory=list)
    run_id: str | None = None
