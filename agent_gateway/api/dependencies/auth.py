import hmac
import logging

from fastapi import HTTPException, Request, status

from agent_gateway.core.settings import Settings
from agent_gateway.dependency_injection import get_container

logger = logging.getLogger(__name__)


def bearer_token_from_header(auth_header: str | None) -> str | None:
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return None


async def require_api_token(request: Request) -> None:
    """Reject the request unless it carries the configured shared bearer secret.

    Without a configured ``API_AUTH_TOKEN`` every request is allowed.
    """

    settings = get_container(request).resolve(Settings)
    expected = settings.api_auth_token
    if not expected:
        return

    presented = bearer_token_from_header(request.headers.get("authorization"))
    if presented is None or not hmac.compare_digest(presented.encode(), expected.encode()):
        logger.info("rejected unauthorized agent stream request")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
