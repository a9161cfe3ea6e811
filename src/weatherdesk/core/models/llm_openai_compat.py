from __future__ import annotations

from typing import Any

from weatherdesk.core.http import request_with_retry

from .tool_calling import ModelResponse, ToolCall


class OpenAICompatClient:
    def __init__(self, url: str, model: str, api_key: str | None = None, timeout_s: float = 45.0) -> None:
        self.url = url
        self.model = model
        self.api_key = api_key
        self.timeout_s = timeout_s

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> ModelResponse:
        payload: dict[str, object] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else None
        response = request_with_retry(
            "POST",
            self.url,
            headers=headers,
            json=payload,
            timeout_override=self.timeout_s,
        )
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected chat response type: {type(data).__name__}")
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise ValueError("chat response 'choices' is not a list")
        if not choices:
            return ModelResponse(text="", tool_calls=[], stop_reason=None)
        choice = choices[0]
        if not isinstance(choice, dict):
            raise ValueError("chat response choice is not an object")
        message = choice.get("message") or {}
        if not isinstance(message, dict):
            raise ValueError("chat response message is not an object")
        raw_tool_calls = message.get("tool_calls") or []
        if not isinstance(raw_tool_calls, list) or not all(isinstance(item, dict) for item in raw_tool_calls):
            raise ValueError("chat response tool_calls is malformed")
        tool_calls = [ToolCall.from_wire(item) for item in raw_tool_calls]
        return ModelResponse(
            text=str(message.get("content") or ""),
            tool_calls=tool_calls,
            stop_reason=choice.get("finish_reason"),
        )

    def chat_completion(self, system: str, user: str, temperature: float, max_tokens: int) -> str:
        response = self.chat(
            [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.text
