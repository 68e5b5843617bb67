from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
import inspect
import logging
from typing import Any

from agent_gateway.agents.base import AgentInvoker
from agent_gateway.streams.chunks import (
    ClassifiedChunk,
    as_record,
    classify_chunk,
    extract_text,
    extract_tool_calls,
    extract_tool_results,
    message_candidate,
)
from agent_gateway.streams.events import AgentStreamEvent, done_event, to_json

logger = logging.getLogger(__name__)

STREAM_MODES = ["messages", "updates"]


@dataclass
class TurnContext:
    """Per-turn state; owned by exactly one turn and discarded when it ends."""

    thread_id: str
    debug: bool = False
    cancel_event: asyncio.Event | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    started_tools: set[str] = field(default_factory=set)
    ended_tools: set[str] = field(default_factory=set)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


def identity_key(name: str, value: Any, tool_id: str | None) -> str:
    if tool_id:
        return tool_id
    return f"{name}:{to_json(value)}"


def chunk_events(context: TurnContext, chunk: ClassifiedChunk) -> list[AgentStreamEvent]:
    """Events for one chunk, ordered token, tool_start, tool_end, debug."""

    events: list[AgentStreamEvent] = []

    if chunk.mode == "messages":
        message = as_record(message_candidate(chunk.payload))
        if message is not None:
            for text in extract_text(message.get("content")):
                events.append({"type": "token", "text": text})

    for call in extract_tool_calls(chunk.payload):
        key = identity_key(call.name, call.input, call.id)
        if key in context.started_tools:
            continue
        context.started_tools.add(key)
        if call.id:
            events.append({"type": "tool_start", "id": call.id, "name": call.name, "input": call.input})
        else:
            events.append({"type": "tool_start", "name": call.name, "input": call.input})

    for result in extract_tool_results(chunk.payload):
        key = identity_key(result.name, result.output, result.id)
        if key in context.ended_tools:
            continue
        context.ended_tools.add(key)
        if result.id:
            events.append({"type": "tool_end", "id": result.id, "name": result.name, "output": result.output})
        else:
            events.append({"type": "tool_end", "name": result.name, "output": result.output})

    if context.debug:
        events.append({"type": "debug", "message": "Stream chunk", "data": {"mode": chunk.mode}})

    return events


async def stream_agent_events(
    *,
    agent: AgentInvoker,
    message: str,
    thread_id: str,
    metadata: dict[str, Any] | None = None,
    files: dict[str, Any] | None = None,
    debug: bool = False,
    cancel_event: asyncio.Event | None = None,
) -> AsyncIterator[AgentStreamEvent]:
    """Run one turn against ``agent`` and yield its normalized events.

    Exactly one ``done`` event ends every turn. Cancellation is polled before
    the engine is invoked and at each chunk boundary. Engine exceptions
    propagate to the caller.
    """

    context = TurnContext(thread_id=thread_id, debug=debug, cancel_event=cancel_event, metadata=metadata or {})
    if context.cancelled:
        yield done_event("aborted")
        return

    agent_input: dict[str, Any] = {"messages": [{"role": "user", "content": message}]}
    if files is not None:
        agent_input["files"] = files

    stream = agent.astream(
        agent_input,
        config={"configurable": {"thread_id": thread_id}, "metadata": context.metadata},
        stream_mode=STREAM_MODES,
    )
    if inspect.isawaitable(stream):
        stream = await stream

    chunks = _aiter_chunks(stream)
    try:
        async for raw_chunk in chunks:
            if context.cancelled:
                logger.debug("agent stream aborted", extra={"thread_id": thread_id})
                yield done_event("aborted")
                return

            for event in chunk_events(context, classify_chunk(raw_chunk)):
                yield event
    finally:
        await chunks.aclose()
        await _close_stream(stream)

    logger.debug("agent stream completed", extra={"thread_id": thread_id})
    yield done_event("stop")


async def _aiter_chunks(stream: AsyncIterable[Any] | Iterable[Any]) -> AsyncIterator[Any]:
    if isinstance(stream, AsyncIterable):
        async for chunk in stream:
            yield chunk
        return

    for chunk in stream:
        yield chunk


async def _close_stream(stream: Any) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()
        return

    close = getattr(stream, "close", None)
    if close is not None:
        close()
