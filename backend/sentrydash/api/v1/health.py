from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from sentrydash.api.deps import RoomStoreDep
from sentrydash.core.config import settings
from sentrydash.core.errors import DependencyError

router = APIRouter()


@router.get("", summary="Health check", tags=["health"])
def read_health() -> dict[str, str]:
    """Return basic service health information."""
    return {"status": "ok"}


@router.get("/ready", summary="Readiness check", tags=["health"])
async def read_ready(store: RoomStoreDep):
    """Check if the room store answers (readiness probe)."""
    try:
        await store.ping()
        return {"status": "ready", "store": "connected"}
    except DependencyError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "store": "disconnected",
                "error": e.message if settings.ENVIRONMENT != "production" else "Store connection failed",
            },
        )
