"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: 200 whenever the process is up."""
    return {"status": "ok"}


@router.get("/ready", response_model=None)
async def ready(req: Request) -> dict[str, str] | JSONResponse:
    """Readiness probe: 503 until startup has wired the services."""
    if not all(hasattr(req.app.state, name) for name in ("settings", "summarizer", "grader", "notifier")):
        return JSONResponse(status_code=503, content={"status": "starting"})
    return {"status": "ready"}
