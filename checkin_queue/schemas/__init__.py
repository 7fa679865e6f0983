from checkin_queue.schemas.appointment import (
    AppointmentCreate,
    AppointmentCreateResponse,
    OutboundResponse,
    AppointmentListResponse,
    StatusResponse,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "AppointmentCreate",
    "AppointmentCreateResponse",
    "OutboundResponse",
    "AppointmentListResponse",
    "StatusResponse",
    "HealthResponse",
    "ErrorResponse",
]
