"""
Appointment Model
In-memory queue records, mirrored to the per-day JSON files
"""
from datetime import datetime
from typing import List, Optional
import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_local_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes from hand-edited or legacy files are taken as host local time."""
    if value is not None and value.tzinfo is None:
        return value.astimezone()
    return value


class HistoryAction(str, enum.Enum):
    """Enum for history log entry kinds"""
    OUTBOUND = "outbound"
    DAILY_SAVE = "daily_save"


class Appointment(BaseModel):
    """
    A vehicle waiting at (or released from) the check-in desk.
    Serialized with camelCase keys, both over HTTP and on disk.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    phone: str
    license_plate: str = Field(..., alias="licensePlate")
    is_outbound: bool = Field(default=False, alias="isOutbound")
    timestamp: datetime
    outbound_time: Optional[datetime] = Field(default=None, alias="outboundTime")

    @field_validator("timestamp", "outbound_time")
    @classmethod
    def ensure_aware(cls, v):
        return as_local_aware(v)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def __repr__(self):
        return f"<Appointment(id={self.id}, plate='{self.license_plate}', outbound={self.is_outbound})>"


class HistoryEntry(BaseModel):
    """
    One record in a day's history log.

    Outbound entries hold the single released appointment; daily_save
    entries hold the whole list archived at rollover.
    """
    model_config = ConfigDict(populate_by_name=True)

    action: HistoryAction
    recorded_at: datetime = Field(..., alias="recordedAt")
    appointments: List[Appointment] = Field(default_factory=list)

    @field_validator("recorded_at")
    @classmethod
    def ensure_aware(cls, v):
        return as_local_aware(v)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class DisplaySnapshot(BaseModel):
    """Derived "now serving" view; never persisted"""
    model_config = ConfigDict(populate_by_name=True)

    appointments: List[Appointment]
    total_waiting: int = Field(..., alias="totalWaiting")
    system_active: bool = Field(..., alias="systemActive")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
