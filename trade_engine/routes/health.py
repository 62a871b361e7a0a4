"""Health check endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness probe; reports which store backend is wired in."""
    return {"status": "healthy", "store": request.app.state.config.store_backend}
