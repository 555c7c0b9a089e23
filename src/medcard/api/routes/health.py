"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: always returns 200 if the process is up."""
    return {"status": "ok"}


@router.get("/ready", response_model=None)
async def ready(request: Request) -> dict[str, str] | JSONResponse:
    """Readiness probe: 503 until the lifespan has wired the services."""
    state = request.app.state
    if not hasattr(state, "intake_service") or not hasattr(state, "card_service"):
        return JSONResponse(status_code=503, content={"status": "starting"})
    return {"status": "ready"}
