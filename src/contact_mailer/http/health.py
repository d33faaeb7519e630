"""Health check endpoints."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe endpoint.

    Returns 200 OK if the process is running.
    """
    return {"status": "ok", "check": "liveness"}


@router.get("/ready")
async def readiness() -> dict[str, str]:
    """Readiness probe endpoint.

    The app is only created once the mailer configuration has been
    validated, so serving this route means it is ready. The relay itself
    is not contacted.
    """
    return {"status": "ok", "check": "readiness"}
