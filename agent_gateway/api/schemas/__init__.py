from agent_gateway.api.schemas.agent_stream import AgentStreamRequest, HealthResponse

__all__ = ["AgentStreamRequest", "HealthResponse"]
