from __future__ import annotations

import json

import pytest

from weatherdesk.core.models.llm_provider import LLMUnavailable
from weatherdesk.core.models.tool_calling import ModelResponse, ToolCall
from weatherdesk.core.orchestration.orchestrator import Orchestrator, ToolLoopExceededError
from weatherdesk.core.orchestration.schemas import ChatRequest, HistoryMessage
from weatherdesk.core.reports.writer import ReportWriter
from weatherdesk.core.tools.base import UnknownToolError
from weatherdesk.core.tools.registry import build_tool_registry
from weatherdesk.core.weather.errors import CityNotFoundError


class FakeWeatherClient:
    def __init__(self, record) -> None:
        self.record = record
        self.cities: list[str] = []

    def fetch_weather(self, city: str):
        self.cities.append(city)
        if city != self.record.city:
            raise CityNotFoundError(city)
        return self.record


class ScriptedModel:
    def __init__(self, steps) -> None:
        self.steps = list(steps)
        self.calls: list[list[dict]] = []

    def converse(self, messages, tool_defs):
        self.calls.append([dict(message) for message in messages])
        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step(messages) if callable(step) else step


def _call(call_id: str, name: str, arguments: dict | None, raw: str | None = None) -> ToolCall:
    return ToolCall(
        id=call_id,
        name=name,
        arguments=arguments,
        raw_arguments=raw if raw is not None else json.dumps(arguments, ensure_ascii=False),
    )


def _tools_response(*calls: ToolCall) -> ModelResponse:
    return ModelResponse(text="", tool_calls=list(calls), stop_reason="tool_calls")


def _final(text: str) -> ModelResponse:
    return ModelResponse(text=text, tool_calls=[], stop_reason="stop")


@pytest.fixture
def weather_client(moscow_weather) -> FakeWeatherClient:
    return FakeWeatherClient(moscow_weather)


@pytest.fixture
def writer(tmp_path) -> ReportWriter:
    return ReportWriter(reports_dir=tmp_path / "reports", public_base_url="http://example.test")


def _orchestrator(model, weather_client, writer, max_round_trips: int = 5) -> Orchestrator:
    return Orchestrator(
        model=model,
        registry=build_tool_registry(weather_client, writer),
        max_round_trips=max_round_trips,
    )


def test_no_tool_calls_finishes_in_one_round_trip(weather_client, writer) -> None:
    model = ScriptedModel([_final("Привет! Чем помочь?")])

    result = _orchestrator(model, weather_client, writer).run("привет")

    assert result.final_response == "Привет! Чем помочь?"
    assert result.round_trips == 1
    assert result.tool_results == []
    assert result.weather is None
    assert weather_client.cities == []


def test_weather_then_analysis_chain_records_both_artifacts(weather_client, writer) -> None:
    def analyze_previous(messages):
        weather_data = json.loads(messages[-1]["content"])
        return _tools_response(_call("call-2", "analyze_weather", {"weather_data": weather_data, "analysis_type": "clothing"}))

    model = ScriptedModel(
        [
            _tools_response(_call("call-1", "get_weather", {"city": "Москва"})),
            analyze_previous,
            _final("Оденьтесь теплее."),
        ]
    )

    result = _orchestrator(model, weather_client, writer).run("Что надеть в Москве?")

    assert result.final_response == "Оденьтесь теплее."
    assert result.round_trips == 3
    assert result.weather is not None and result.weather.city == "Москва"
    assert result.analysis is not None and result.analysis.type == "clothing"
    dispatched = [event["payload"] for event in result.trace_events if event["event"] == "ToolDispatched"]
    assert [(item["tool"], item["tool_call_id"], item["ok"]) for item in dispatched] == [
        ("get_weather", "call-1", True),
        ("analyze_weather", "call-2", True),
    ]


def test_tool_results_are_appended_after_assistant_message(weather_client, writer) -> None:
    model = ScriptedModel([_tools_response(_call("call-1", "get_weather", {"city": "Москва"})), _final("ok")])

    _orchestrator(model, weather_client, writer).run("погода в москве")

    second_call = model.calls[1]
    assert second_call[-2]["role"] == "assistant"
    assert second_call[-2]["tool_calls"][0]["id"] == "call-1"
    assert second_call[-1]["role"] == "tool"
    assert second_call[-1]["tool_call_id"] == "call-1"


def test_city_is_extracted_from_free_text_before_lookup(weather_client, writer) -> None:
    model = ScriptedModel([_tools_response(_call("call-1", "get_weather", {"city": "какая погода в москве"})), _final("ok")])

    result = _orchestrator(model, weather_client, writer).run("какая погода в москве")

    assert weather_client.cities == ["Москва"]
    assert result.weather is not None


def test_failed_tool_becomes_error_result_and_loop_continues(weather_client, writer) -> None:
    model = ScriptedModel([_tools_response(_call("call-1", "get_weather", {"city": "Атлантида"})), _final("Не нашёл такой город.")])

    result = _orchestrator(model, weather_client, writer).run("погода в Атлантиде")

    assert result.final_response == "Не нашёл такой город."
    assert len(result.tool_results) == 1
    tool_result = result.tool_results[0]
    assert tool_result.ok is False
    assert tool_result.content.startswith("Ошибка: ")
    assert "Атлантида" in tool_result.content
    assert model.calls[1][-1]["content"] == tool_result.content
    assert result.weather is None


def test_malformed_arguments_get_fixed_message_without_side_effects(weather_client, writer) -> None:
    model = ScriptedModel(
        [
            _tools_response(
                _call("call-1", "get_weather", None, raw="{city: Москва"),
                _call("call-2", "save_weather_report", {"city": "Москва", "format": "pdf"}),
            ),
            _final("Повторите запрос."),
        ]
    )

    result = _orchestrator(model, weather_client, writer).run("погода")

    assert [item.content for item in result.tool_results] == [
        "Ошибка: не указан город",
        "Ошибка: некорректные данные для сохранения отчёта",
    ]
    assert weather_client.cities == []
    assert not writer.reports_dir.exists()


def test_full_chain_writes_report(weather_client, writer) -> None:
    def analyze(messages):
        weather_data = json.loads(messages[-1]["content"])
        return _tools_response(_call("c2", "analyze_weather", {"weather_data": weather_data, "analysis_type": "health"}))

    def save(messages):
        analysis = json.loads(messages[-1]["content"])
        weather_data = json.loads(messages[-3]["content"])
        return _tools_response(
            _call("c3", "save_weather_report", {"city": "Москва", "weather_data": weather_data, "analysis": analysis, "format": "md"})
        )

    model = ScriptedModel([_tools_response(_call("c1", "get_weather", {"city": "Москва"})), analyze, save, _final("Отчёт готов.")])

    result = _orchestrator(model, weather_client, writer).run("сохрани отчёт о погоде в Москве в формате md")

    assert result.report is not None
    assert result.report.format == "md"
    assert (writer.reports_dir / result.report.file_name).exists()


def test_unknown_tool_propagates(weather_client, writer) -> None:
    model = ScriptedModel([_tools_response(_call("call-1", "delete_everything", {}))])

    with pytest.raises(UnknownToolError):
        _orchestrator(model, weather_client, writer).run("удали всё")


def test_tool_loop_cap_raises(weather_client, writer) -> None:
    model = ScriptedModel([_tools_response(_call(f"call-{i}", "get_weather", {"city": "Москва"})) for i in range(3)])

    with pytest.raises(ToolLoopExceededError):
        _orchestrator(model, weather_client, writer, max_round_trips=3).run("погода в москве")

    assert len(model.calls) == 3
    assert weather_client.cities == ["Москва", "Москва"]


def test_model_failure_propagates(weather_client, writer) -> None:
    model = ScriptedModel([LLMUnavailable("connection refused")])

    with pytest.raises(LLMUnavailable):
        _orchestrator(model, weather_client, writer).run("погода в москве")


def test_history_is_sent_before_new_message(weather_client, writer) -> None:
    model = ScriptedModel([_final("ok")])
    request = ChatRequest(
        message="а завтра?",
        history=[
            HistoryMessage(role="user", content="погода в Риге"),
            HistoryMessage(role="assistant", content="В Риге +5"),
        ],
    )

    result = _orchestrator(model, weather_client, writer).handle(request)

    sent = model.calls[0]
    assert sent[0]["role"] == "system"
    assert [message["content"] for message in sent[1:]] == ["погода в Риге", "В Риге +5", "а завтра?"]
    assert result.run_id
