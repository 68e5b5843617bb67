from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AgentStreamRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input: str = Field(..., min_length=1, description="User turn sent to the agent")
    thread_id: str | None = Field(
        default=None,
        alias="threadId",
        description="Conversation identity; a new thread is started when omitted",
    )
    metadata: dict[str, Any] | None = Field(default=None, description="Opaque metadata forwarded to the agent run")


class HealthResponse(BaseModel):
    ok: bool = Field(..., description="Always true while the process is alive")
    timestamp: datetime = Field(..., description="Server time of the health check")
