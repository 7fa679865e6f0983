from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from checkin_queue.models.appointment import Appointment


class AppointmentCreate(BaseModel):
    """Schema for submitting an appointment at the check-in desk"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Driver name")
    phone: str = Field(..., min_length=1, description="Mobile number")
    license_plate: str = Field(..., min_length=1, alias="licensePlate", description="Vehicle license plate")
    is_outbound: Optional[bool] = Field(False, alias="isOutbound", description="Register as already outbound")


class AppointmentCreateResponse(BaseModel):
    """Schema for create response"""
    success: bool = True
    appointment: Appointment


class OutboundResponse(BaseModel):
    """Schema for outbound marking response"""
    success: bool = True
    appointment: Appointment


class AppointmentListResponse(BaseModel):
    """Schema for the waiting list together with the current display"""
    model_config = ConfigDict(populate_by_name=True)

    appointments: List[Appointment]
    current_display: List[Appointment] = Field(..., alias="currentDisplay")
    system_active: bool = Field(..., alias="systemActive")
    total_waiting: int = Field(..., alias="totalWaiting")


class StatusResponse(BaseModel):
    """Schema for system status"""
    model_config = ConfigDict(populate_by_name=True)

    system_active: bool = Field(..., alias="systemActive")
    current_time: datetime = Field(..., alias="currentTime")
    total_waiting: int = Field(..., alias="totalWaiting")
    current_display: List[Appointment] = Field(..., alias="currentDisplay")


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
