from datetime import UTC, datetime

from fastapi import APIRouter

from agent_gateway.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse)
def healthz() -> HealthResponse:
    return HealthResponse(ok=True, timestamp=datetime.now(UTC))
