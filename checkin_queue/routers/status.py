"""
Status Router
System status and history log endpoints
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from checkin_queue.core.dependencies import get_queue_service
from checkin_queue.models.appointment import HistoryEntry
from checkin_queue.schemas.appointment import StatusResponse
from checkin_queue.services.queue_service import QueueService

router = APIRouter(prefix="/api", tags=["Status"])


@router.get("/status", response_model=StatusResponse)
def get_status(service: QueueService = Depends(get_queue_service)):
    """Active-hours flag, server time and the current display."""
    now = service.clock()
    if service.refresh_active_status(now):
        service.publish_display()
    display = service.compute_display()
    return StatusResponse(
        system_active=display.system_active,
        current_time=now,
        total_waiting=display.total_waiting,
        current_display=display.appointments,
    )


@router.get("/history", response_model=List[HistoryEntry])
def get_history(
    day: Optional[date] = Query(None, alias="date", description="Day to read (YYYY-MM-DD), defaults to the current day"),
    service: QueueService = Depends(get_queue_service)
):
    """History log for a day; empty list when nothing was recorded."""
    return service.load_history(day)
