"""Agent assembly: model, MCP tools, skill files and the turn runtime."""
