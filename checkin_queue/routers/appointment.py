"""
Appointment Router
Handles appointment submission and outbound marking
"""
from fastapi import APIRouter, Depends, status
import logging

from checkin_queue.core.dependencies import get_queue_service
from checkin_queue.schemas.appointment import (
    AppointmentCreate,
    AppointmentCreateResponse,
    AppointmentListResponse,
    ErrorResponse,
    OutboundResponse,
)
from checkin_queue.services.queue_service import QueueService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Appointments"])


@router.post(
    "/appointments",
    response_model=AppointmentCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def create_appointment(
    appointment_data: AppointmentCreate,
    service: QueueService = Depends(get_queue_service)
):
    """
    Submit a new appointment. Public endpoint.

    Phone and license plate formats are checked by the client form only;
    here they just have to be present.

    Args:
        appointment_data: Name, phone, license plate and optional outbound flag
        service: Queue service

    Returns:
        The created appointment
    """
    appointment = service.create(
        name=appointment_data.name,
        phone=appointment_data.phone,
        license_plate=appointment_data.license_plate,
        is_outbound=bool(appointment_data.is_outbound),
    )
    return AppointmentCreateResponse(appointment=appointment)


@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(service: QueueService = Depends(get_queue_service)):
    """Waiting appointments in submission order, plus the current display."""
    if service.refresh_active_status():
        service.publish_display()
    display = service.compute_display()
    return AppointmentListResponse(
        appointments=service.list_waiting(),
        current_display=display.appointments,
        system_active=display.system_active,
        total_waiting=display.total_waiting,
    )


@router.post(
    "/outbound/{appointment_id}",
    response_model=OutboundResponse,
    responses={404: {"model": ErrorResponse}},
)
def mark_outbound(
    appointment_id: str,
    service: QueueService = Depends(get_queue_service)
):
    """
    Mark an appointment as outbound, removing it from the waiting queue.

    Args:
        appointment_id: Appointment identifier
        service: Queue service

    Returns:
        The updated appointment
    """
    logger.info(f"[Appointment] Outbound requested for {appointment_id}")
    appointment = service.mark_outbound(appointment_id)
    return OutboundResponse(appointment=appointment)
