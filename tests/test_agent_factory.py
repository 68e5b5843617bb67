from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from langchain_openai import ChatOpenAI

from agent_gateway.agents import factory
from agent_gateway.agents.mcp_tooling import load_mcp_tools
from agent_gateway.agents.runtime import AgentRuntime
from tests.conftest import build_test_settings


def _capture_agent_build(monkeypatch: pytest.MonkeyPatch, tools: list[Any] | None = None) -> dict[str, Any]:
    captured: dict[str, Any] = {}

    async def fake_load_mcp_tools(mcp_servers: dict[str, Any]) -> list[Any]:
        captured["mcp_servers"] = mcp_servers
        return tools or []

    def fake_create_deep_agent(**kwargs: Any) -> object:
        captured.update(kwargs)
        return object()

    monkeypatch.setattr(factory, "load_mcp_tools", fake_load_mcp_tools)
    monkeypatch.setattr(factory, "create_deep_agent", fake_create_deep_agent)
    return captured


def test_build_agent_model_uses_openai_compatible_settings() -> None:
    model = factory._build_agent_model(build_test_settings())  # noqa: SLF001

    assert isinstance(model, ChatOpenAI)
    assert model.model_name == "test-model"
    assert model.temperature == 0


@pytest.mark.asyncio
async def test_load_mcp_tools_without_servers_returns_no_tools() -> None:
    assert await load_mcp_tools({}) == []


@pytest.mark.asyncio
async def test_build_agent_runtime_wires_tools_skills_and_files(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    skill_dir = tmp_path / "skills" / "example"
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text("# Example", encoding="utf-8")
    fake_tools = [object()]
    captured = _capture_agent_build(monkeypatch, tools=fake_tools)

    runtime = await factory.build_agent_runtime(build_test_settings(PROJECT_ROOT=str(tmp_path), DEBUG="true"))

    assert isinstance(runtime, AgentRuntime)
    assert runtime.debug is True
    assert captured["mcp_servers"] == {}
    assert captured["tools"] is fake_tools
    assert captured["skills"] == ["/skills"]
    assert captured["system_prompt"] == factory.DEFAULT_SYSTEM_PROMPT
    assert isinstance(captured["model"], ChatOpenAI)
    assert captured["checkpointer"] is not None

    seeded = runtime._files_for_thread("thread-a")  # noqa: SLF001
    assert seeded is not None
    assert list(seeded) == ["/skills/example/SKILL.md"]
    assert seeded["/skills/example/SKILL.md"]["content"] == ["# Example"]
    assert runtime._files_for_thread("thread-a") is None  # noqa: SLF001


@pytest.mark.asyncio
async def test_build_agent_runtime_passes_remote_skills_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "skills" / "remote").mkdir(parents=True)
    captured = _capture_agent_build(monkeypatch)

    await factory.build_agent_runtime(
        build_test_settings(PROJECT_ROOT=str(tmp_path), SKILLS_DIRS="./missing", REMOTE_SKILLS_ENABLED="true")
    )

    assert captured["skills"] == ["/skills/remote"]


@pytest.mark.asyncio
async def test_build_agent_runtime_without_skills_passes_none(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    captured = _capture_agent_build(monkeypatch)

    runtime = await factory.build_agent_runtime(build_test_settings(PROJECT_ROOT=str(tmp_path)))

    assert captured["skills"] is None
    assert captured["system_prompt"] == factory.DEFAULT_SYSTEM_PROMPT
    assert runtime._files_for_thread("thread-a") is None  # noqa: SLF001
