from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from agent_gateway.agents.factory import build_agent_runtime
from agent_gateway.agents.runtime import AgentRuntime
from agent_gateway.api.router import api_router
from agent_gateway.api.routers.health import router as health_router
from agent_gateway.core.logging import configure_logging
from agent_gateway.core.settings import Settings, get_settings
from agent_gateway.dependency_injection import build_container, register_agent_runtime

logger = logging.getLogger(__name__)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    del request
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "issues": jsonable_encoder(exc.errors())},
    )


def create_app(settings: Settings | None = None, runtime: AgentRuntime | None = None) -> FastAPI:
    """Build the gateway app; a prebuilt ``runtime`` skips agent assembly at startup."""

    settings = settings or get_settings()
    container = build_container(settings)
    if runtime is not None:
        register_agent_runtime(container, runtime)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("starting agent gateway", extra={"app_env": settings.app_env, "debug": settings.debug})
        if runtime is None:
            register_agent_runtime(container, await build_agent_runtime(settings))

        try:
            yield
        finally:
            logger.info("agent gateway shutdown complete")

    app = FastAPI(
        title="Agent Gateway",
        version="0.1.0",
        docs_url="/docs" if settings.enable_swagger else None,
        redoc_url="/redoc" if settings.enable_swagger else None,
        openapi_url="/openapi.json" if settings.enable_swagger else None,
        lifespan=lifespan,
    )
    app.state.container = container
    app.add_exception_handler(RequestValidationError, _request_validation_error)

    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    return app


def app_factory() -> FastAPI:
    """Entry point for ``uvicorn --factory``."""

    settings = get_settings()
    configure_logging(settings.effective_log_level)
    return create_app(settings)
