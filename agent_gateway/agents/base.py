from collections.abc import AsyncIterable, Awaitable, Iterable
from typing import Any, Protocol


class AgentInvoker(Protocol):
    """Contract for the agent execution engine whose raw chunks get normalized.

    LangGraph compiled graphs satisfy this directly. The returned stream may be
    async or sync, and may need to be awaited first.
    """

    def astream(
        self,
        input: dict[str, Any],
        *,
        config: dict[str, Any],
        stream_mode: list[str],
    ) -> AsyncIterable[Any] | Iterable[Any] | Awaitable[AsyncIterable[Any] | Iterable[Any]]:
        """Stream raw chunks for one turn."""
