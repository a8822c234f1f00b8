import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def health(request: Request):
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        request.app.state.database.ping()
    except Exception:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": timestamp,
                "error": "Service check failed",
                "services": {"database": "disconnected"},
            },
        )

    services = request.app.state.services
    return {
        "status": "healthy",
        "timestamp": timestamp,
        "services": {
            "database": "connected",
            "billing": "configured" if services.stripe else "not_configured",
            "googleDrive": "configured" if services.google_drive.configured else "not_configured",
            "linkedin": "configured" if services.linkedin.configured else "not_configured",
        },
    }
