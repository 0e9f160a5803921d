"""Appointment operations exposed to the API layer."""

import logging
from typing import Any, Mapping, Optional
from dataclasses import dataclass, field

from ..models import DoctorCatalog
from ..services.appointment_store import AppointmentStore
from ..services.availability import AvailabilityChecker
from ..services.booking import BookingService
from ..services.errors import ConflictError, SchedulingError, StorageError, ValidationError
from ..services.lifecycle import LifecycleService
from ..services.meet_links import MeetLinkIssuer
from ..services.slot_generator import SlotGenerator
from ..utils import clean_text, parse_appointment_date

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Result from an operation."""
    success: bool
    data: dict = field(default_factory=dict)
    message: str = ""
    error: Optional[str] = None
    status: int = 200

    def to_response(self) -> dict:
        """JSON body for the HTTP response."""
        body = {"success": self.success, "message": self.message}
        if self.error:
            body["error"] = self.error
        body.update(self.data)
        return body


def _error_result(action: str, exc: Exception) -> ToolResult:
    """Turn an exception raised by a service into a failed result."""
    if isinstance(exc, StorageError):
        return ToolResult(
            success=False,
            error=exc.code,
            message=f"Error {action}",
            status=exc.status,
        )
    if isinstance(exc, SchedulingError):
        data = {}
        if isinstance(exc, ConflictError) and exc.available_slots is not None:
            data["availableSlots"] = exc.available_slots
        return ToolResult(
            success=False,
            data=data,
            error=exc.code,
            message=exc.message,
            status=exc.status,
        )

    logger.error(f"Unexpected error {action}: {exc}", exc_info=exc)
    return ToolResult(
        success=False,
        error="internal_error",
        message=f"Error {action}",
        status=500,
    )


class AppointmentTools:
    """
    Operation boundary for appointment management.

    Every operation returns a ToolResult with:
    - success: Whether the operation succeeded
    - data: Response fields (camelCase)
    - message: What to show the user
    - error: Error code if failed
    - status: HTTP status code
    """

    def __init__(
        self,
        store: AppointmentStore,
        slot_generator: SlotGenerator,
        availability: AvailabilityChecker,
        booking: BookingService,
        lifecycle: LifecycleService,
        meet_links: MeetLinkIssuer,
        catalog: DoctorCatalog,
    ):
        self.db = store
        self.slots = slot_generator
        self.availability = availability
        self.booking = booking
        self.lifecycle = lifecycle
        self.meet_links = meet_links
        self.catalog = catalog

    async def list_doctors(self, specialization: Optional[str] = None) -> ToolResult:
        """Doctor catalog and the daily slot table."""
        doctors = self.catalog.by_specialization(specialization) if specialization else self.catalog.all()
        return ToolResult(
            success=True,
            data={
                "doctors": [d.model_dump() for d in doctors],
                "timeSlots": list(self.slots.slots),
            },
            message=f"Found {len(doctors)} doctors",
        )

    async def check_availability(self, params: Mapping[str, Any]) -> ToolResult:
        """
        Check one doctor's slots on a day.

        Args:
            params: doctorName, date, optional timeSlot

        Returns:
            ToolResult with available and availableSlots
        """
        try:
            doctor_name = clean_text(params.get("doctorName"))
            if not doctor_name:
                raise ValidationError("Missing required fields: doctorName")
            day = parse_appointment_date(params.get("date"))
            if day is None:
                raise ValidationError("A valid date is required")

            result = await self.availability.check(
                doctor_name, day, clean_text(params.get("timeSlot")) or None
            )
            body = result.to_response()
            message = body.pop("message")
            return ToolResult(success=True, data=body, message=message)

        except Exception as e:
            return _error_result("checking availability", e)

    async def book_appointment(self, owner_id: str, params: Mapping[str, Any]) -> ToolResult:
        """
        Book an appointment.

        Args:
            owner_id: Authenticated user id
            params: doctorName, specialization, date, timeSlot, patientName,
                patientPhone, optional reason

        Returns:
            ToolResult with the created appointment, or a 409 result carrying
            availableSlots when the slot is taken
        """
        try:
            request = self.booking.parse_request(params)
            created = await self.booking.book(request, owner_id)
            return ToolResult(
                success=True,
                data={"appointment": created.to_response()},
                message="Appointment booked successfully",
                status=201,
            )
        except Exception as e:
            return _error_result("booking appointment", e)

    async def retrieve_appointments(self, owner_id: str) -> ToolResult:
        """A user's appointments ordered by date, then slot."""
        try:
            appointments = await self.db.get_appointments_by_owner(owner_id)
            appointments.sort(key=lambda a: (a.date, self.slots.sort_key(a.time_slot)))
            return ToolResult(
                success=True,
                data={
                    "appointments": [a.to_response() for a in appointments],
                    "count": len(appointments),
                },
                message=f"Found {len(appointments)} appointments",
            )
        except Exception as e:
            return _error_result("fetching appointments", e)

    async def cancel_appointment(self, owner_id: str, appointment_id: str) -> ToolResult:
        """Cancel one of the user's appointments."""
        try:
            await self.lifecycle.cancel(appointment_id, owner_id)
            return ToolResult(success=True, message="Appointment cancelled successfully")
        except Exception as e:
            return _error_result("cancelling appointment", e)

    async def modify_appointment(
        self,
        owner_id: str,
        appointment_id: str,
        params: Mapping[str, Any],
    ) -> ToolResult:
        """
        Reschedule one of the user's appointments.

        Args:
            owner_id: Authenticated user id
            appointment_id: Appointment to move
            params: date, timeSlot, optional refreshed booking details
        """
        try:
            updated = await self.lifecycle.reschedule(
                appointment_id,
                owner_id,
                params.get("date"),
                clean_text(params.get("timeSlot")) or None,
                details=params,
            )
            return ToolResult(
                success=True,
                data={"appointment": updated.to_response()},
                message="Appointment rescheduled successfully",
            )
        except Exception as e:
            return _error_result("rescheduling appointment", e)

    async def create_meet_link(self, owner_id: str, appointment_id: Optional[str]) -> ToolResult:
        """Issue or fetch the meeting link of an appointment."""
        try:
            if not appointment_id:
                raise ValidationError("Appointment ID is required")
            appointment = await self.meet_links.ensure_link(appointment_id, owner_id)
            return ToolResult(
                success=True,
                data={
                    "meetLink": appointment.meet_link,
                    "appointment": appointment.to_response(),
                },
                message="Meeting link ready",
            )
        except Exception as e:
            return _error_result("creating meeting link", e)
