"""Shared test utilities and fixtures for agent-gateway tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from agent_gateway.core.settings import Settings


class ScriptedAgent:
    """Agent engine double that replays a fixed list of raw chunks and records its calls."""

    def __init__(self, chunks: list[Any] | None = None) -> None:
        self.chunks = chunks or []
        self.calls: list[dict[str, Any]] = []

    async def astream(self, input: dict[str, Any], *, config: dict[str, Any], stream_mode: list[str]) -> AsyncIterator[Any]:
        self.calls.append({"input": input, "config": config, "stream_mode": stream_mode})
        for chunk in self.chunks:
            yield chunk


class FailingAgent:
    """Agent engine double that fails after emitting its first chunk."""

    async def astream(self, input: dict[str, Any], *, config: dict[str, Any], stream_mode: list[str]) -> AsyncIterator[Any]:
        del input, config, stream_mode
        yield "messages", [{"content": "partial"}, {"langgraph_node": "model"}]
        raise RuntimeError("upstream model failure")


def build_test_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "OPENAI_API_KEY": "test-key",
        "OPENAI_BASE_URL": "https://example.com/v1",
        "OPENAI_MODEL": "test-model",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings() -> Settings:
    return build_test_settings()


async def collect(events: AsyncIterator[Any]) -> list[Any]:
    return [event async for event in events]
