from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import re
from typing import Annotated, Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator
import yaml

logger = logging.getLogger(__name__)

_ENV_REFERENCE = re.compile(r"\$\{([A-Z0-9_]+)\}")


class StdioServerConfig(BaseModel):
    name: str = Field(..., min_length=1)
    enabled: bool = True
    transport: Literal["stdio"]
    command: str = Field(..., min_length=1)
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] | None = None
    cwd: str | None = None


class RemoteServerConfig(BaseModel):
    name: str = Field(..., min_length=1)
    enabled: bool = True
    transport: Literal["http", "sse"]
    url: str
    headers: dict[str, str] | None = None

    @field_validator("url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("url must be an absolute URL")
        return value


McpServerConfig = Annotated[StdioServerConfig | RemoteServerConfig, Field(discriminator="transport")]


class McpFileConfig(BaseModel):
    servers: list[McpServerConfig] = Field(default_factory=list)


@dataclass(frozen=True)
class ParsedMcpConfig:
    source_path: str
    enabled_servers: list[str] = field(default_factory=list)
    mcp_servers: dict[str, dict[str, Any]] = field(default_factory=dict)


def interpolate_environment(value: str) -> str:
    """Replace ``${VAR}`` references with environment values; unknown variables become empty."""

    return _ENV_REFERENCE.sub(lambda match: os.environ.get(match.group(1), ""), value)


def _parse_mcp_file(path: Path) -> McpFileConfig:
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    return McpFileConfig.model_validate(parsed or {})


def _build_connection(server: StdioServerConfig | RemoteServerConfig) -> dict[str, Any]:
    if isinstance(server, StdioServerConfig):
        connection: dict[str, Any] = {"transport": "stdio", "command": server.command, "args": server.args}
        if server.env is not None:
            connection["env"] = server.env
        if server.cwd is not None:
            connection["cwd"] = server.cwd
        return connection

    connection = {
        "transport": "streamable_http" if server.transport == "http" else "sse",
        "url": interpolate_environment(server.url),
    }
    if server.headers:
        connection["headers"] = {key: interpolate_environment(value) for key, value in server.headers.items()}
    return connection


def load_mcp_config(
    *,
    config_path: str,
    enabled_servers: list[str],
    disabled_servers: list[str],
) -> ParsedMcpConfig:
    source_path = Path(config_path).resolve()
    if not source_path.exists():
        logger.warning("MCP config file does not exist, skip MCP tools", extra={"source_path": str(source_path)})
        return ParsedMcpConfig(source_path=str(source_path))

    file_config = _parse_mcp_file(source_path)
    allowed = set(enabled_servers)
    blocked = set(disabled_servers)

    mcp_servers: dict[str, dict[str, Any]] = {}
    enabled: list[str] = []
    for server in file_config.servers:
        if not server.enabled:
            continue
        if allowed and server.name not in allowed:
            continue
        if server.name in blocked:
            continue
        mcp_servers[server.name] = _build_connection(server)
        enabled.append(server.name)

    logger.debug("loaded MCP config", extra={"source_path": str(source_path), "enabled_servers": enabled})
    return ParsedMcpConfig(source_path=str(source_path), enabled_servers=enabled, mcp_servers=mcp_servers)
