from datetime import datetime, timezone

from fastapi import APIRouter

from .endpoints import auth, tasks
from task_tracker.schemas.base import ERROR_RESPONSES, HealthResponse

router = APIRouter()

# Include all API endpoints
router.include_router(auth.router, prefix="/auth", tags=["authentication"], responses=ERROR_RESPONSES)
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"], responses=ERROR_RESPONSES)


@router.get("/health", response_model=HealthResponse, tags=["health"])
def health_check():
    return HealthResponse(
        message="Server is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
