from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .deps import get_orchestrator
from weatherdesk.core.models.llm_provider import LLMUnavailable
from weatherdesk.core.orchestration.orchestrator import Orchestrator, ToolLoopExceededError
from weatherdesk.core.orchestration.schemas import ChatRequest, HistoryMessage
from weatherdesk.core.tools.base import UnknownToolError

router = APIRouter()


class ChatBody(BaseModel):
    message: str = Field(min_length=1)
    history: list[HistoryMessage] = Field(default_factory=list)


@router.post("")
def chat(body: ChatBody, orchestrator: Orchestrator = Depends(get_orchestrator)) -> dict:
    try:
        result = orchestrator.handle(ChatRequest(message=body.message, history=body.history))
    except LLMUnavailable as exc:
        raise HTTPException(status_code=502, detail=f"chat model unavailable: {exc}") from exc
    except (ToolLoopExceededError, UnknownToolError) as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    payload: dict[str, object] = {"message": result.final_response, "run_id": result.run_id}
    if result.weather is not None:
        payload["weather_data"] = result.weather.model_dump()
    if result.analysis is not None:
        payload["analysis"] = result.analysis.model_dump()
    if result.report is not None:
        payload["report"] = result.report.model_dump()
    return payload
