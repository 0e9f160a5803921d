"""Services package for scheduling and storage."""

from .appointment_store import AppointmentStore, InMemoryAppointmentStore
from .availability import AvailabilityChecker
from .booking import BookingService
from .lifecycle import LifecycleService
from .meet_links import MeetLinkIssuer
from .slot_generator import SlotGenerator
from .supabase_service import SupabaseService

__all__ = [
    "AppointmentStore",
    "InMemoryAppointmentStore",
    "AvailabilityChecker",
    "BookingService",
    "LifecycleService",
    "MeetLinkIssuer",
    "SlotGenerator",
    "SupabaseService",
]
