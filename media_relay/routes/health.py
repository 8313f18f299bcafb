from datetime import UTC, datetime

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(request: Request):
    """
    Liveness probe for the load balancer. Makes no upstream calls.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": request.app.state.config.app_env,
    }
