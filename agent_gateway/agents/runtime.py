from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
import logging
from typing import Any
import uuid

from agent_gateway.agents.base import AgentInvoker
from agent_gateway.agents.virtual_files import VirtualFiles, clone_virtual_files
from agent_gateway.streams.events import AgentStreamEvent, done_event, error_event
from agent_gateway.streams.pipeline import stream_agent_events

logger = logging.getLogger(__name__)


def resolve_thread_id(thread_id: str | None) -> str:
    if thread_id and thread_id.strip():
        return thread_id.strip()
    return str(uuid.uuid4())


class AgentRuntime:
    """Runs agent turns and seeds preloaded skill files into each new thread once."""

    def __init__(
        self,
        *,
        agent: AgentInvoker,
        debug: bool = False,
        preloaded_files: VirtualFiles | None = None,
    ) -> None:
        self._agent = agent
        self._debug = debug
        self._preloaded_files = preloaded_files or {}
        self._seeded_threads: set[str] = set()

    @property
    def debug(self) -> bool:
        return self._debug

    def _files_for_thread(self, thread_id: str) -> VirtualFiles | None:
        if not self._preloaded_files or thread_id in self._seeded_threads:
            return None
        self._seeded_threads.add(thread_id)
        return clone_virtual_files(self._preloaded_files)

    async def run(
        self,
        message: str,
        *,
        thread_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[AgentStreamEvent]:
        resolved_thread_id = resolve_thread_id(thread_id)
        files = self._files_for_thread(resolved_thread_id)
        logger.debug(
            "running agent turn",
            extra={
                "thread_id": resolved_thread_id,
                "message_length": len(message),
                "seeded_files": len(files) if files else 0,
            },
        )

        try:
            async for event in stream_agent_events(
                agent=self._agent,
                message=message,
                thread_id=resolved_thread_id,
                metadata=metadata,
                files=files,
                debug=self._debug,
                cancel_event=cancel_event,
            ):
                yield event
        except Exception as exc:
            logger.exception("agent stream failed", extra={"thread_id": resolved_thread_id})
            yield error_event(str(exc), code="AGENT_STREAM_FAILED")
            yield done_event("error")
