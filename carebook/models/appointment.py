"""Appointment data models."""

import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class AppointmentStatus(str, Enum):
    """Possible appointment statuses."""
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Appointment(BaseModel):
    """Represents a booked appointment."""
    id: Optional[str] = Field(default=None, description="Unique appointment ID")
    owner_id: str = Field(..., description="ID of the user who booked it")
    doctor_name: str = Field(..., description="Doctor name, matched exactly")
    specialization: str = Field(..., description="Doctor specialization")
    date: datetime.date = Field(..., description="Appointment day")
    time_slot: str = Field(..., description="One of the daily slot labels")
    patient_name: str = Field(...)
    patient_phone: str = Field(...)
    reason: str = Field(default="")
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED)
    meet_link: Optional[str] = Field(default=None)
    created_at: Optional[datetime.datetime] = Field(default=None)
    updated_at: Optional[datetime.datetime] = Field(default=None)

    @property
    def is_active(self) -> bool:
        """Whether the appointment occupies its slot."""
        return self.status == AppointmentStatus.SCHEDULED

    @property
    def slot_key(self) -> tuple:
        """Key under which the appointment occupies a slot."""
        return (self.doctor_name, self.date, self.time_slot)

    def to_response(self) -> dict:
        """Serialize for API responses (camelCase, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)

    class Config:
        use_enum_values = True
        alias_generator = to_camel
        populate_by_name = True


class BookingRequest(BaseModel):
    """Parsed and validated booking input."""
    doctor_name: str
    specialization: str
    date: datetime.date
    time_slot: str
    patient_name: str
    patient_phone: str
    reason: str = ""


class AvailabilityResult(BaseModel):
    """Free/booked slots for a doctor on one day."""
    doctor_name: str
    date: datetime.date
    time_slot: Optional[str] = None
    available: bool
    available_slots: List[str] = Field(default_factory=list)
    booked_slots: List[str] = Field(default_factory=list)

    def to_response(self) -> dict:
        """Serialize for API responses."""
        if self.available:
            message = "Slot is available" if self.time_slot else "Slots are available"
        else:
            message = "Selected slot is not available" if self.time_slot else "No slots available"
        return {
            "available": self.available,
            "availableSlots": self.available_slots,
            "bookedSlots": self.booked_slots,
            "message": message,
        }
