"""Health and status endpoint."""

from fastapi import APIRouter

from pond_server.session import PondSession


def setup_router(session: PondSession) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health() -> dict:
        return {"status": "ok", "clients": session.channel_count, **session.engine.stats()}

    return router
