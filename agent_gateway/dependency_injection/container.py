from __future__ import annotations

import punq
from fastapi import Request

from agent_gateway.agents.runtime import AgentRuntime
from agent_gateway.core.settings import Settings


def build_container(settings: Settings) -> punq.Container:
    container = punq.Container()
    container.register(Settings, instance=settings)
    return container


def register_agent_runtime(container: punq.Container, runtime: AgentRuntime) -> None:
    container.register(AgentRuntime, instance=runtime)


def get_container(request: Request) -> punq.Container:
    return request.app.state.container
