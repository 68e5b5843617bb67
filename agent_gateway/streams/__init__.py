"""Normalization of raw agent chunks into the stable event vocabulary."""

from agent_gateway.streams.events import AgentStreamEvent, encode_sse_event
from agent_gateway.streams.pipeline import stream_agent_events

__all__ = ["AgentStreamEvent", "encode_sse_event", "stream_agent_events"]
