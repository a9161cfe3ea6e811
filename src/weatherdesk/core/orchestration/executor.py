from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from weatherdesk.core.models.tool_calling import ToolCall
from weatherdesk.core.observability.trace import Trace
from weatherdesk.core.tools.registry import ToolRegistry
from weatherdesk.core.weather.errors import WeatherApiError

from .schemas import ToolResult

logger = logging.getLogger("weatherdesk.tools")


class Executor:
    """Validates and runs one tool call at a time.

    Provider and file errors become error results for the model to read;
    an unknown tool name raises ``UnknownToolError``.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    def execute(self, call: ToolCall, trace: Trace | None = None) -> ToolResult:
        tool = self.registry.get(call.name)
        result = self._run(tool, call)
        if trace is not None:
            trace.emit("ToolDispatched", {"tool": call.name, "ok": result.ok, "tool_call_id": call.id})
        logger.info(
            "tool_dispatched",
            extra={"extra_fields": {"tool": call.name, "ok": result.ok, "tool_call_id": call.id}},
        )
        return result

    def _run(self, tool, call: ToolCall) -> ToolResult:
        if call.arguments is None:
            return self._error(call, tool.invalid_arguments_message)
        try:
            args = tool.Args.model_validate(call.arguments)
        except ValidationError:
            return self._error(call, tool.invalid_arguments_message)

        try:
            output = tool.run(args)
        except WeatherApiError as exc:
            return self._error(call, f"Ошибка: {exc.message}")
        except OSError as exc:
            return self._error(call, f"Ошибка: не удалось сохранить отчёт ({exc.strerror or exc})")

        data = output.model_dump()
        return ToolResult(
            tool_call_id=call.id,
            name=call.name,
            ok=True,
            content=json.dumps(data, ensure_ascii=False),
            data=data,
        )

    @staticmethod
    def _error(call: ToolCall, message: str) -> ToolResult:
        return ToolResult(tool_call_id=call.id, name=call.name, ok=False, content=message)
