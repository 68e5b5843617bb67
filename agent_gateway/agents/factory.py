from __future__ import annotations

import logging

from deepagents import create_deep_agent
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI
from langgraph.checkpoint.memory import InMemorySaver

from agent_gateway.agents.mcp_tooling import load_mcp_tools
from agent_gateway.agents.runtime import AgentRuntime
from agent_gateway.agents.virtual_files import load_virtual_files
from agent_gateway.core.mcp import load_mcp_config
from agent_gateway.core.settings import Settings
from agent_gateway.core.skills import resolve_skill_sources

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = " ".join(
    [
        "You are a practical coding assistant.",
        "Prefer concise reasoning and explicit tool usage when needed.",
        "Use available MCP tools and skills when they help solve the user request.",
    ]
)


def _build_agent_model(settings: Settings) -> BaseChatModel:
    logger.info("using OpenAI-compatible chat model", extra={"model": settings.openai_model})
    return ChatOpenAI(
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        api_key=settings.openai_api_key,
        temperature=0,
        streaming=True,
    )


async def build_agent_runtime(settings: Settings) -> AgentRuntime:
    """Assemble the deep agent, its MCP tools and preloaded skill files."""

    mcp_config = load_mcp_config(
        config_path=settings.mcp_config_path,
        enabled_servers=settings.mcp_enabled_servers,
        disabled_servers=settings.mcp_disabled_servers,
    )
    tools = await load_mcp_tools(mcp_config.mcp_servers)

    skills = resolve_skill_sources(
        project_root=settings.project_root,
        requested_dirs=settings.skills_dirs,
        remote_skills_enabled=settings.remote_skills_enabled,
    )
    preloaded_files = (
        load_virtual_files(project_root=settings.project_root, directories=skills.filesystem_dirs)
        if skills.filesystem_dirs
        else {}
    )

    agent = create_deep_agent(
        model=_build_agent_model(settings),
        tools=tools,
        system_prompt=DEFAULT_SYSTEM_PROMPT,
        skills=skills.backend_skill_sources or None,
        checkpointer=InMemorySaver(),
    )

    logger.info(
        "agent runtime initialized",
        extra={
            "mcp_servers": mcp_config.enabled_servers,
            "skill_sources": skills.backend_skill_sources,
            "skill_files_preloaded": len(preloaded_files),
            "session_memory": "in-memory-checkpointer",
        },
    )
    return AgentRuntime(
        agent=agent,
        debug=settings.debug,
        preloaded_files=preloaded_files,
    )
