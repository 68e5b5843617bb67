"""Server-sent events transport for agent turns.

Frames follow the SSE wire format: ``event: <type>`` then ``data: <json>``.
An initial ``session`` frame announces the thread id, ``: ping`` comments
keep idle connections open, and every turn ends with exactly one ``done``
frame unless the client went away first.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
import logging
from typing import Any, Protocol

import anyio
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from agent_gateway.agents.runtime import AgentRuntime, resolve_thread_id
from agent_gateway.api.dependencies.auth import require_api_token
from agent_gateway.api.schemas import AgentStreamRequest
from agent_gateway.core.settings import Settings
from agent_gateway.dependency_injection import get_container
from agent_gateway.streams.events import AgentStreamEvent, done_event, encode_sse_event, encode_sse_frame, error_event

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/agent", tags=["agent"])

HEARTBEAT_FRAME = ": ping\n\n"
SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_END_OF_STREAM = object()


class DisconnectAware(Protocol):
    async def is_disconnected(self) -> bool: ...


async def _next_event(events: AsyncIterator[AgentStreamEvent]) -> Any:
    try:
        return await anext(events)
    except StopAsyncIteration:
        return _END_OF_STREAM


async def _discard_pending(pending: asyncio.Task[Any], *, thread_id: str) -> None:
    if not pending.done():
        pending.cancel()
        await asyncio.wait({pending})
    if pending.cancelled():
        return
    exc = pending.exception()
    if exc is not None:
        logger.debug("discarded agent event failure after disconnect", extra={"thread_id": thread_id, "error": str(exc)})


async def sse_frames(
    events: AsyncIterator[AgentStreamEvent],
    *,
    request: DisconnectAware,
    thread_id: str,
    cancel_event: asyncio.Event,
    heartbeat_interval: float,
    debug: bool,
) -> AsyncIterator[str]:
    """Frame ``events`` for the wire, interleaving heartbeats while the agent is quiet.

    At most one event is in flight at a time, so nothing is buffered ahead of
    the client. Once the client disconnects the turn is cancelled and no
    further frames are produced.
    """

    done_sent = False
    pending: asyncio.Task[Any] | None = None
    try:
        yield encode_sse_frame("session", {"threadId": thread_id})
        while True:
            if pending is None:
                pending = asyncio.create_task(_next_event(events))
            finished, _ = await asyncio.wait({pending}, timeout=heartbeat_interval)

            if await request.is_disconnected():
                logger.info("client disconnected, aborting agent turn", extra={"thread_id": thread_id})
                cancel_event.set()
                return

            if not finished:
                yield HEARTBEAT_FRAME
                continue

            task, pending = pending, None
            event = task.result()
            if event is _END_OF_STREAM:
                return
            if event["type"] == "debug" and not debug:
                continue
            if event["type"] == "done":
                done_sent = True
            yield encode_sse_event(event)
    except Exception as exc:
        logger.exception("SSE request failed", extra={"thread_id": thread_id})
        if not done_sent:
            yield encode_sse_event(error_event(str(exc), code="SSE_ROUTE_FAILED"))
            yield encode_sse_event(done_event("error"))
    finally:
        # Cleanup has to complete even while the response task is being cancelled.
        with anyio.CancelScope(shield=True):
            if not done_sent:
                cancel_event.set()
            if pending is not None:
                await _discard_pending(pending, thread_id=thread_id)
            await events.aclose()


@router.post(
    "/stream",
    summary="Stream one agent turn as server-sent events",
    description="Runs the agent on the submitted input and streams token, tool and terminal events until the turn completes.",
    dependencies=[Depends(require_api_token)],
)
async def stream(payload: AgentStreamRequest, request: Request) -> StreamingResponse:
    container = get_container(request)
    settings = container.resolve(Settings)
    runtime = container.resolve(AgentRuntime)

    thread_id = resolve_thread_id(payload.thread_id)
    cancel_event = asyncio.Event()
    logger.info("agent stream request", extra={"thread_id": thread_id, "input_length": len(payload.input)})

    events = runtime.run(
        payload.input,
        thread_id=thread_id,
        metadata=payload.metadata,
        cancel_event=cancel_event,
    )
    return StreamingResponse(
        sse_frames(
            events,
            request=request,
            thread_id=thread_id,
            cancel_event=cancel_event,
            heartbeat_interval=settings.heartbeat_interval_seconds,
            debug=settings.debug,
        ),
        media_type="text/event-stream",
        headers={**SSE_HEADERS, "X-Thread-Id": thread_id},
    )
