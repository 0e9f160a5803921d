"""Booking protocol: validate, then atomically create or reject."""

import logging
from typing import Any, List, Mapping

from ..models import Appointment, AppointmentStatus, BookingRequest
from ..utils import clean_text, parse_appointment_date
from .appointment_store import AppointmentStore
from .availability import AvailabilityChecker
from .errors import ConflictError, SlotTakenError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    ("doctorName", "doctor_name"),
    ("specialization", "specialization"),
    ("date", "date"),
    ("timeSlot", "time_slot"),
    ("patientName", "patient_name"),
    ("patientPhone", "patient_phone"),
)


class BookingService:
    """Creates scheduled appointments without ever double-booking a slot."""

    def __init__(self, store: AppointmentStore, availability: AvailabilityChecker):
        self.store = store
        self.availability = availability

    def parse_request(self, payload: Mapping[str, Any]) -> BookingRequest:
        """
        Validate raw booking input.

        Accepts camelCase (wire) or snake_case keys. Everything except
        ``reason`` is required.

        Raises:
            ValidationError: On a missing field, bad date, unknown slot or doctor.
        """
        values = {}
        missing = []
        for wire_name, field_name in REQUIRED_FIELDS:
            raw = payload.get(wire_name, payload.get(field_name))
            if field_name == "date" and not isinstance(raw, str):
                value = raw
            else:
                value = clean_text(raw)
            if value is None or value == "":
                missing.append(wire_name)
            values[field_name] = value

        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        day = parse_appointment_date(values["date"])
        if day is None:
            raise ValidationError(f"Invalid date: {values['date']!r}")

        self.availability.require_doctor(values["doctor_name"])
        label = self.availability.require_slot(values["time_slot"])

        return BookingRequest(
            doctor_name=values["doctor_name"],
            specialization=values["specialization"],
            date=day,
            time_slot=label,
            patient_name=values["patient_name"],
            patient_phone=values["patient_phone"],
            reason=clean_text(payload.get("reason")),
        )

    async def book(self, request: BookingRequest, owner_id: str) -> Appointment:
        """
        Book a slot for a user.

        The store's insert is the availability check: it fails with
        SlotTakenError if an active appointment holds the slot, whatever any
        earlier read reported.

        Raises:
            ValidationError: If owner_id is empty.
            ConflictError: Slot taken; carries the doctor's free slots for the day.
            StorageError: Persistence failure.
        """
        if not owner_id:
            raise ValidationError("Missing owner")

        logger.info(
            f"Attempting to book {request.doctor_name} on {request.date} at {request.time_slot}"
        )

        appointment = Appointment(
            owner_id=owner_id,
            doctor_name=request.doctor_name,
            specialization=request.specialization,
            date=request.date,
            time_slot=request.time_slot,
            patient_name=request.patient_name,
            patient_phone=request.patient_phone,
            reason=request.reason,
            status=AppointmentStatus.SCHEDULED,
        )

        try:
            return await self.store.create_appointment(appointment)
        except SlotTakenError:
            alternatives = await self._alternatives(request)
            logger.warning(
                f"Slot {request.time_slot} on {request.date} already booked for {request.doctor_name}"
            )
            free_text = self.availability.slots.format_slots(alternatives)
            raise ConflictError(
                f"This slot is already booked. Free slots: {free_text}",
                available_slots=alternatives,
            )

    async def _alternatives(self, request: BookingRequest) -> List[str]:
        result = await self.availability.check(request.doctor_name, request.date)
        return result.available_slots
