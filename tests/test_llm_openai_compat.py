from __future__ import annotations

import json

import httpx
import pytest

from weatherdesk.core.config import Settings
from weatherdesk.core.models.llm_openai_compat import OpenAICompatClient
from weatherdesk.core.models.llm_provider import ChatModel, LLMUnavailable


def test_chat_parses_tool_calls_and_finish_reason(install_transport) -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            request=request,
            json={
                "choices": [
                    {
                        "finish_reason": "tool_calls",
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "tool_calls": [
                                {
                                    "id": "call_1",
                                    "type": "function",
                                    "function": {"name": "get_weather", "arguments": "{\"city\": \"Рига\"}"},
                                }
                            ],
                        },
                    }
                ]
            },
        )

    install_transport(handler)
    client = OpenAICompatClient(url="http://llm.local/v1/chat/completions", model="test-model", api_key="k")
    tools = [{"type": "function", "function": {"name": "get_weather", "parameters": {}}}]

    response = client.chat([{"role": "user", "content": "погода в Риге"}], tools=tools)

    assert response.text == ""
    assert response.stop_reason == "tool_calls"
    assert response.tool_calls[0].id == "call_1"
    assert response.tool_calls[0].name == "get_weather"
    assert response.tool_calls[0].arguments == {"city": "Рига"}
    assert seen[0]["model"] == "test-model"
    assert seen[0]["tools"] == tools


def test_chat_model_off_raises_unavailable() -> None:
    model = ChatModel.from_settings(Settings(llm_provider="off"))

    with pytest.raises(LLMUnavailable):
        model.converse([{"role": "user", "content": "hi"}], [])


def test_chat_model_http_failure_raises_unavailable(install_transport) -> None:
    install_transport(lambda request: httpx.Response(500, request=request))
    model = ChatModel.from_settings(Settings(llm_provider="http", llm_url="http://llm.local/v1/chat/completions"))

    with pytest.raises(LLMUnavailable):
        model.complete_text("system", "user")


def test_complete_text_returns_message_content(install_transport) -> None:
    install_transport(
        lambda request: httpx.Response(
            200,
            request=request,
            json={"choices": [{"finish_reason": "stop", "message": {"role": "assistant", "content": "Тепло."}}]},
        )
    )
    model = ChatModel.from_settings(Settings(llm_provider="http"))

    assert model.complete_text("system", "user") == "Тепло."


@pytest.mark.parametrize("body", [["not", "an", "object"], "plain text", {"choices": "none"}, {"choices": [42]}])
def test_chat_rejects_malformed_response_body(install_transport, body) -> None:
    install_transport(lambda request: httpx.Response(200, request=request, json=body))
    client = OpenAICompatClient(url="http://llm.local/v1/chat/completions", model="test-model")

    with pytest.raises(ValueError):
        client.chat([{"role": "user", "content": "hi"}])


def test_chat_model_maps_malformed_response_to_unavailable(install_transport) -> None:
    install_transport(lambda request: httpx.Response(200, request=request, json=[{"choices": []}]))
    model = ChatModel.from_settings(Settings(llm_provider="http", llm_url="http://llm.local/v1/chat/completions"))

    with pytest.raises(LLMUnavailable):
        model.converse([{"role": "user", "content": "погода в Риге"}], [])
