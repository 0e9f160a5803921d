"""Scheduling error taxonomy.

Every domain error carries a machine-readable ``code`` and the HTTP status the
API answers with. Services raise these; the operation boundary in
``carebook.tools.appointment_tools`` turns them into structured results.
"""

from typing import List, Optional


class SchedulingError(Exception):
    """Base class for scheduling domain errors."""

    code = "scheduling_error"
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Missing or malformed input."""

    code = "validation_error"
    status = 400


class ConflictError(SchedulingError):
    """Requested slot is already taken."""

    code = "slot_unavailable"
    status = 409

    def __init__(self, message: str, available_slots: Optional[List[str]] = None):
        super().__init__(message)
        self.available_slots = available_slots


class NotFoundError(SchedulingError):
    code = "not_found"
    status = 404


class ForbiddenError(SchedulingError):
    code = "forbidden"
    status = 403


class PastAppointmentError(SchedulingError):
    """Mutation attempted on an appointment dated before today."""

    code = "past_appointment"
    status = 400


class InvalidStateError(SchedulingError):
    """Appointment status does not allow the requested transition."""

    code = "invalid_state"
    status = 400


class StorageError(SchedulingError):
    """Persistence failure. The message is not shown to end users."""

    code = "storage_error"
    status = 500


class SlotTakenError(Exception):
    """Raised by a store when a write would put two active appointments in one slot."""

    def __init__(self, doctor_name: str, date, time_slot: str):
        super().__init__(f"{doctor_name} is already booked on {date} at {time_slot}")
        self.doctor_name = doctor_name
        self.date = date
        self.time_slot = time_slot
