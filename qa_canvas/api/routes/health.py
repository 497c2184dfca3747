from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from qa_canvas.config.settings import settings
from qa_canvas.core.dependencies import get_ai_service
from qa_canvas.repositories.interfaces.ai_service import IAIService

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    environment: str


@router.get("", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="1.0.0",
        environment=settings.environment
    )


@router.get("/readiness")
async def readiness_check(ai_service: IAIService = Depends(get_ai_service)):
    """Readiness check endpoint"""
    checks = {
        "ai_provider": ai_service.provider,
        "ai_model": ai_service.model_name,
        "credentials": "ok" if ai_service.is_configured() else "not_configured",
    }

    return {
        "status": "ready" if checks["credentials"] == "ok" else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc)
    }
