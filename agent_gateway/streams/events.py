from __future__ import annotations

import json
from typing import Any, Literal, NotRequired, TypedDict

from pydantic import BaseModel


class TokenEvent(TypedDict):
    type: Literal["token"]
    text: str


class ToolStartEvent(TypedDict):
    type: Literal["tool_start"]
    id: NotRequired[str]
    name: str
    input: Any


class ToolEndEvent(TypedDict):
    type: Literal["tool_end"]
    id: NotRequired[str]
    name: str
    output: Any


class DebugEvent(TypedDict):
    type: Literal["debug"]
    message: str
    data: NotRequired[Any]


class ErrorEvent(TypedDict):
    type: Literal["error"]
    message: str
    code: NotRequired[str]


FinishReason = Literal["stop", "error", "aborted"]


class DoneEvent(TypedDict):
    type: Literal["done"]
    finishReason: FinishReason


AgentStreamEventType = Literal["token", "tool_start", "tool_end", "debug", "error", "done"]

AgentStreamEvent = TokenEvent | ToolStartEvent | ToolEndEvent | DebugEvent | ErrorEvent | DoneEvent


def done_event(finish_reason: FinishReason) -> DoneEvent:
    return {"type": "done", "finishReason": finish_reason}


def error_event(message: str, code: str | None = None) -> ErrorEvent:
    event: ErrorEvent = {"type": "error", "message": message}
    if code:
        event["code"] = code
    return event


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def to_json(value: Any) -> str:
    """Serialize arbitrary agent payloads; values JSON cannot express fall back to ``str``."""

    return json.dumps(value, default=_json_default, ensure_ascii=False)


def encode_sse_frame(event_type: str, data: dict[str, Any]) -> str:
    return f"event: {event_type}\ndata: {to_json(data)}\n\n"


def encode_sse_event(event: AgentStreamEvent) -> str:
    """Frame one event: the ``event:`` line carries the type, ``data:`` every other field."""

    payload = {key: value for key, value in event.items() if key != "type"}
    return encode_sse_frame(event["type"], payload)
