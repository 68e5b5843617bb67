from fastapi import APIRouter

from agent_gateway.api.routers.agent_stream import router as agent_stream_router

api_router = APIRouter()
api_router.include_router(agent_stream_router)
