from __future__ import annotations

from typing import Any

from weatherdesk.core.reports.writer import ReportWriter
from weatherdesk.core.weather.provider import YandexWeatherClient

from .base import Tool, UnknownToolError
from .builtin.analyze_weather import AnalyzeWeatherTool
from .builtin.get_weather import GetWeatherTool
from .builtin.save_report import SaveReportTool


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError as exc:
            raise UnknownToolError(name) from exc

    def names(self) -> list[str]:
        return sorted(self._tools.keys())

    def definitions(self) -> list[dict[str, Any]]:
        """Tool definitions in the chat-completions ``tools`` format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.Args.model_json_schema(),
                },
            }
            for tool in self._tools.values()
        ]


def build_tool_registry(weather_client: YandexWeatherClient, report_writer: ReportWriter) -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(GetWeatherTool(weather_client))
    registry.register(AnalyzeWeatherTool())
    registry.register(SaveReportTool(report_writer))
    return registry
