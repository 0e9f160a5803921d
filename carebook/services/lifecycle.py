"""Cancel and reschedule transitions."""

import logging
from datetime import date
from typing import Any, Callable, Mapping, Optional

from ..models import Appointment, AppointmentStatus
from ..utils import clean_text, parse_appointment_date
from .appointment_store import AppointmentStore
from .availability import AvailabilityChecker
from .errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PastAppointmentError,
    SlotTakenError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Optional reschedule fields refreshed from the request when present
REFRESHABLE_FIELDS = (
    ("doctorName", "doctor_name"),
    ("specialization", "specialization"),
    ("patientName", "patient_name"),
    ("patientPhone", "patient_phone"),
    ("reason", "reason"),
)


async def load_owned_appointment(
    store: AppointmentStore,
    appointment_id: str,
    requester_id: str,
    action: str,
) -> Appointment:
    """
    Fetch an appointment and check that the requester owns it.

    Raises:
        NotFoundError: Unknown id.
        ForbiddenError: Appointment belongs to someone else.
    """
    appointment = await store.get_appointment_by_id(appointment_id) if appointment_id else None
    if appointment is None:
        raise NotFoundError("Appointment not found")
    if appointment.owner_id != requester_id:
        logger.warning(f"User {requester_id} denied {action} on appointment {appointment_id}")
        raise ForbiddenError(f"Not authorized to {action} this appointment")
    return appointment


class LifecycleService:
    """Owner-initiated transitions of scheduled appointments."""

    def __init__(
        self,
        store: AppointmentStore,
        availability: AvailabilityChecker,
        today: Callable[[], date],
    ):
        """
        Args:
            store: Appointment store
            availability: Availability checker used for reschedule conflicts
            today: Clock returning the clinic's current date
        """
        self.store = store
        self.availability = availability
        self.today = today

    def _require_upcoming(self, appointment: Appointment, action: str) -> None:
        if appointment.date < self.today():
            raise PastAppointmentError(f"Cannot {action} past appointments")

    async def cancel(self, appointment_id: str, requester_id: str) -> Appointment:
        """
        Cancel a scheduled appointment.

        Cancelling an appointment that is already cancelled succeeds without
        changing it.

        Raises:
            NotFoundError, ForbiddenError, InvalidStateError, PastAppointmentError
        """
        appointment = await load_owned_appointment(self.store, appointment_id, requester_id, "cancel")

        if appointment.status == AppointmentStatus.CANCELLED:
            logger.info(f"Appointment {appointment_id} already cancelled")
            return appointment
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise InvalidStateError(f"Cannot cancel a {appointment.status} appointment")
        self._require_upcoming(appointment, "cancel")

        cancelled = await self.store.update_appointment(
            appointment_id,
            {"status": AppointmentStatus.CANCELLED.value},
        )
        if cancelled is None:
            # Status changed between the read and the conditional update
            current = await self.store.get_appointment_by_id(appointment_id)
            if current is not None and current.status == AppointmentStatus.CANCELLED:
                return current
            raise InvalidStateError("Appointment is no longer scheduled")

        logger.info(f"Appointment {appointment_id} cancelled")
        return cancelled

    async def reschedule(
        self,
        appointment_id: str,
        requester_id: str,
        new_date: Any,
        new_time_slot: Optional[str],
        details: Optional[Mapping[str, Any]] = None,
    ) -> Appointment:
        """
        Move a scheduled appointment to another day and/or slot.

        Args:
            appointment_id: Appointment to move
            requester_id: Caller's user id
            new_date: Target date (date or string)
            new_time_slot: Target slot label
            details: Optional doctorName, specialization, patientName,
                patientPhone, reason to refresh; absent keys keep their values

        Raises:
            NotFoundError, ForbiddenError, InvalidStateError,
            PastAppointmentError, ValidationError, ConflictError
        """
        appointment = await load_owned_appointment(
            self.store, appointment_id, requester_id, "reschedule"
        )

        if appointment.status != AppointmentStatus.SCHEDULED:
            raise InvalidStateError(f"Cannot reschedule a {appointment.status} appointment")
        self._require_upcoming(appointment, "reschedule")

        if new_date is None or new_date == "" or not new_time_slot:
            raise ValidationError("New date and time slot are required")
        target_date = parse_appointment_date(new_date)
        if target_date is None:
            raise ValidationError(f"Invalid date: {new_date!r}")
        if target_date < self.today():
            raise ValidationError("Cannot reschedule into the past")
        target_slot = self.availability.require_slot(new_time_slot)

        updates = {"date": target_date, "time_slot": target_slot}
        for wire_name, field_name in REFRESHABLE_FIELDS:
            value = clean_text((details or {}).get(wire_name))
            if value:
                updates[field_name] = value

        doctor_name = updates.get("doctor_name", appointment.doctor_name)
        if doctor_name != appointment.doctor_name:
            self.availability.require_doctor(doctor_name)

        result = await self.availability.check(
            doctor_name, target_date, target_slot, exclude_id=appointment.id
        )
        if not result.available:
            raise ConflictError("Selected slot is not available", available_slots=result.available_slots)

        # Unique key columns go with every update so a write-time violation
        # can be reported against the right slot
        updates.setdefault("doctor_name", doctor_name)
        try:
            updated = await self.store.update_appointment(appointment_id, updates)
        except SlotTakenError:
            raise ConflictError("Selected slot is not available")

        if updated is None:
            raise InvalidStateError("Appointment is no longer scheduled")

        logger.info(
            f"Appointment {appointment_id} rescheduled to {target_date} at {target_slot}"
        )
        return updated
