"""Public liveness endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from autopilot.config import API_VERSION
from autopilot.models.common import ok

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Return service health; the only route that skips the API key gate."""
    return ok(version=API_VERSION, timestamp=datetime.now(timezone.utc).isoformat())
