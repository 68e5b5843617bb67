from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from agent_gateway.core.mcp import interpolate_environment, load_mcp_config

MCP_YAML = """
servers:
  - name: math
    transport: stdio
    command: npx
    args: ['-y', '@modelcontextprotocol/server-math']
  - name: web
    transport: http
    url: https://example.com/mcp
    headers:
      Authorization: Bearer ${MCP_TEST_TOKEN}
  - name: events
    transport: sse
    url: https://example.com/sse
  - name: retired
    enabled: false
    transport: stdio
    command: retired-server
"""


def _write_config(tmp_path: Path, content: str = MCP_YAML) -> str:
    path = tmp_path / "mcp.test.yaml"
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_enabled_filter_is_an_allow_list(tmp_path: Path) -> None:
    parsed = load_mcp_config(config_path=_write_config(tmp_path), enabled_servers=["math"], disabled_servers=[])

    assert parsed.enabled_servers == ["math"]
    assert parsed.mcp_servers == {
        "math": {"transport": "stdio", "command": "npx", "args": ["-y", "@modelcontextprotocol/server-math"]}
    }


def test_remote_servers_interpolate_env_and_map_transports(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_TEST_TOKEN", "abc")

    parsed = load_mcp_config(config_path=_write_config(tmp_path), enabled_servers=[], disabled_servers=["math"])

    assert parsed.enabled_servers == ["web", "events"]
    assert parsed.mcp_servers["web"] == {
        "transport": "streamable_http",
        "url": "https://example.com/mcp",
        "headers": {"Authorization": "Bearer abc"},
    }
    assert parsed.mcp_servers["events"] == {"transport": "sse", "url": "https://example.com/sse"}


def test_missing_config_file_yields_no_servers(tmp_path: Path) -> None:
    parsed = load_mcp_config(config_path=str(tmp_path / "absent.yaml"), enabled_servers=[], disabled_servers=[])

    assert parsed.enabled_servers == []
    assert parsed.mcp_servers == {}


def test_invalid_server_entry_raises(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "servers:\n  - name: broken\n    transport: http\n    url: not-a-url\n")

    with pytest.raises(ValidationError):
        load_mcp_config(config_path=config_path, enabled_servers=[], disabled_servers=[])


def test_interpolate_environment_blanks_unknown_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_KNOWN", "yes")
    monkeypatch.delenv("MCP_UNKNOWN", raising=False)

    assert interpolate_environment("${MCP_KNOWN}-${MCP_UNKNOWN}") == "yes-"
