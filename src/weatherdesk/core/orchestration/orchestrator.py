from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from pydantic import BaseModel

from weatherdesk.core.analysis.schemas import WeatherAnalysis
from weatherdesk.core.logging.context import get_log_context, log_context
from weatherdesk.core.models.llm_provider import ChatModel
from weatherdesk.core.models.prompts import CHAT_SYSTEM_PROMPT
from weatherdesk.core.observability.trace import Trace
from weatherdesk.core.reports.schemas import ReportDescriptor
from weatherdesk.core.tools.registry import ToolRegistry
from weatherdesk.core.weather.schemas import WeatherRecord

from .executor import Executor
from .schemas import ChatRequest, OrchestrationResult, ToolResult

logger = logging.getLogger("weatherdesk.orchestrator")

_ARTIFACT_MODELS: dict[str, type[BaseModel]] = {
    "weather": WeatherRecord,
    "analysis": WeatherAnalysis,
    "report": ReportDescriptor,
}


class ToolLoopExceededError(RuntimeError):
    def __init__(self, max_round_trips: int) -> None:
        super().__init__(f"tool-loop exceeded: model still requested tools after {max_round_trips} round trips")
        self.max_round_trips = max_round_trips


class Orchestrator:
    def __init__(
        self,
        model: ChatModel,
        registry: ToolRegistry,
        max_round_trips: int = 5,
        history_turns: int = 10,
        system_prompt: str = CHAT_SYSTEM_PROMPT,
    ) -> None:
        self.model = model
        self.registry = registry
        self.executor = Executor(registry)
        self.max_round_trips = max(1, max_round_trips)
        self.history_turns = max(0, history_turns)
        self.system_prompt = system_prompt

    def _initial_messages(self, request: ChatRequest) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [{"role": "system", "content": self.system_prompt}]
        history = request.history[-self.history_turns :] if self.history_turns else []
        messages.extend({"role": item.role, "content": item.content} for item in history)
        messages.append({"role": "user", "content": request.message})
        return messages

    def handle(self, request: ChatRequest) -> OrchestrationResult:
        run_id = str(uuid4())
        trace = Trace(message=request.message, run_id=run_id, correlation_id=get_log_context().get("correlation_id"))
        with log_context(run_id=run_id):
            trace.emit("RunStarted", {"history_count": len(request.history)})
            messages = self._initial_messages(request)
            tool_defs = self.registry.definitions()
            artifacts: dict[str, BaseModel] = {}
            tool_results: list[ToolResult] = []

            for round_trip in range(1, self.max_round_trips + 1):
                response = self.model.converse(messages, tool_defs)
                if not response.tool_calls:
                    trace.emit("RunCompleted", {"round_trips": round_trip, "tool_calls": len(tool_results)})
                    logger.info(
                        "chat_run_completed",
                        extra={"extra_fields": {"round_trips": round_trip, "tool_calls": len(tool_results)}},
                    )
                    return OrchestrationResult(
                        final_response=response.text,
                        weather=artifacts.get("weather"),
                        analysis=artifacts.get("analysis"),
                        report=artifacts.get("report"),
                        tool_results=tool_results,
                        round_trips=round_trip,
                        trace_events=trace.events,
                        run_id=run_id,
                    )
                if round_trip == self.max_round_trips:
                    break

                batch = [self.executor.execute(call, trace) for call in response.tool_calls]
                for result in batch:
                    if result.ok and result.data is not None:
                        kind = self.registry.get(result.name).artifact
                        artifacts[kind] = _ARTIFACT_MODELS[kind].model_validate(result.data)
                tool_results.extend(batch)
                messages.append(response.assistant_message())
                messages.extend(result.to_message() for result in batch)

            trace.emit("ToolLoopExceeded", {"max_round_trips": self.max_round_trips})
            logger.warning("tool_loop_exceeded", extra={"extra_fields": {"max_round_trips": self.max_round_trips}})
            raise ToolLoopExceededError(self.max_round_trips)

    def run(self, message: str) -> OrchestrationResult:
        return self.handle(ChatRequest(message=message))
