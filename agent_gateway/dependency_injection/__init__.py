"""Dependency injection container assembly utilities."""

from agent_gateway.dependency_injection.container import build_container, get_container, register_agent_runtime

__all__ = ["build_container", "get_container", "register_agent_runtime"]
