from __future__ import annotations

import logging
from typing import Any

from langchain_core.tools import BaseTool
from langchain_mcp_adapters.client import MultiServerMCPClient

logger = logging.getLogger(__name__)


async def load_mcp_tools(mcp_servers: dict[str, dict[str, Any]]) -> list[BaseTool]:
    """Collect the tools of every configured MCP server.

    A server that fails to connect is skipped so one broken server does not
    keep the gateway from starting. The client opens a session per tool call,
    so there is nothing to close once the tools are loaded.
    """

    if not mcp_servers:
        return []

    client = MultiServerMCPClient(mcp_servers)
    tools: list[BaseTool] = []
    for server_name in mcp_servers:
        try:
            tools.extend(await client.get_tools(server_name=server_name))
        except Exception:  # noqa: BLE001
            logger.warning("MCP server connection failed, skipped", extra={"server": server_name}, exc_info=True)

    logger.info(
        "MCP tools loaded",
        extra={"servers": list(mcp_servers), "tools": [tool.name for tool in tools]},
    )
    return tools
