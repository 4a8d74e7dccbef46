"""Admin API routes - access audit trail"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from flash_registry.core.config import settings
from flash_registry.core.dependencies import get_tracker
from flash_registry.core.security import require_api_key
from flash_registry.services.presence import PresenceTracker
from flash_registry.api.schemas import (
    AccessLogListResponse,
    AccessStatsResponse,
    ErrorResponse,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_api_key)],
    responses={401: {"model": ErrorResponse}},
)


@router.get("/logs", response_model=AccessLogListResponse)
async def list_access_logs(
    identifier: Optional[str] = None,
    limit: int = Query(settings.ACCESS_LOG_DEFAULT_LIMIT, ge=1, le=1000),
    tracker: PresenceTracker = Depends(get_tracker),
):
    """Get access logs, most recent first"""
    logs = tracker.get_access_logs(identifier=identifier, limit=limit)
    return AccessLogListResponse(logs=logs, count=len(logs))


@router.get("/stats", response_model=AccessStatsResponse)
async def access_statistics(tracker: PresenceTracker = Depends(get_tracker)):
    """Access counters by type and outcome"""
    return AccessStatsResponse(**tracker.get_statistics())
