from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from weatherdesk.core.config import Settings
from weatherdesk.core.http import WeatherdeskHTTPError

from .llm_openai_compat import OpenAICompatClient
from .tool_calling import ModelResponse


class LLMUnavailable(RuntimeError):
    pass


@dataclass
class LLMConfig:
    provider: str
    model: str
    timeout_s: float
    temperature: float
    max_tokens: int


class ChatModel:
    def __init__(self, config: LLMConfig, client: OpenAICompatClient | None = None) -> None:
        self.config = config
        self._client = client
        self.logger = logging.getLogger("weatherdesk.llm")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatModel":
        config = LLMConfig(
            provider=settings.llm_provider,
            model=settings.llm_model,
            timeout_s=settings.llm_timeout_s,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        client = OpenAICompatClient(
            url=settings.llm_url,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            timeout_s=settings.llm_timeout_s,
        )
        return cls(config, client)

    @property
    def enabled(self) -> bool:
        return self.config.provider != "off" and self._client is not None

    def converse(self, messages: list[dict[str, Any]], tool_defs: list[dict[str, Any]]) -> ModelResponse:
        return self._call(
            lambda client: client.chat(
                messages,
                tools=tool_defs,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            ),
            mode="tools",
            message_count=len(messages),
        )

    def complete_text(self, system: str, user: str, max_tokens: int | None = None) -> str:
        return self._call(
            lambda client: client.chat_completion(
                system=system,
                user=user,
                temperature=self.config.temperature,
                max_tokens=max_tokens or self.config.max_tokens,
            ),
            mode="text",
            message_count=2,
        )

    def _call(self, fn, mode: str, message_count: int):
        if not self.enabled:
            raise LLMUnavailable("LLM provider is off")

        start = time.perf_counter()
        ok = False
        try:
            output = fn(self._client)
            ok = True
            return output
        except (WeatherdeskHTTPError, ValueError) as exc:
            raise LLMUnavailable(f"LLM request failed: {exc}") from exc
        finally:
            self.logger.info(
                "llm_call",
                extra={
                    "extra_fields": {
                        "provider": self.config.provider,
                        "model": self.config.model,
                        "mode": mode,
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                        "ok": ok,
                        "message_count": message_count,
                    }
                },
            )
