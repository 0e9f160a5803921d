"""Data models package."""

from .appointment import Appointment, AppointmentStatus, AvailabilityResult, BookingRequest
from .doctor import DEFAULT_DOCTORS, Doctor, DoctorCatalog

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AvailabilityResult",
    "BookingRequest",
    "DEFAULT_DOCTORS",
    "Doctor",
    "DoctorCatalog",
]
