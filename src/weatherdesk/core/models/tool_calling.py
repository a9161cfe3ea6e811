from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: dict[str, Any] | None
    raw_arguments: str = ""

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "ToolCall":
        function = payload.get("function") or {}
        raw = function.get("arguments")
        if isinstance(raw, dict):
            arguments: dict[str, Any] | None = raw
            raw = json.dumps(raw, ensure_ascii=False)
        else:
            raw = str(raw or "")
            try:
                parsed = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError:
                parsed = None
            arguments = parsed if isinstance(parsed, dict) else None
        return cls(id=str(payload.get("id") or ""), name=str(function.get("name") or ""), arguments=arguments, raw_arguments=raw)

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments},
        }


@dataclass
class ModelResponse:
    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: str | None = None

    def assistant_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": self.text or None}
        if self.tool_calls:
            message["tool_calls"] = [call.to_wire() for call in self.tool_calls]
        return message
