"""
Indexer status route.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from stablelink.api.schemas.common import IndexerStatusResponse
from stablelink.scheduler.poll_scheduler import peek_poll_scheduler


router = APIRouter()


@router.get("/status", response_model=IndexerStatusResponse, summary="Indexer Status")
async def get_indexer_status():
    """Scheduler state, pass counters and the last processed block."""
    scheduler = peek_poll_scheduler()
    checked_at = datetime.now(timezone.utc)

    if scheduler is None:
        return IndexerStatusResponse(status="stopped", checked_at=checked_at)

    return IndexerStatusResponse(**await scheduler.get_status(), checked_at=checked_at)
