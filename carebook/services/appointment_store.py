"""Appointment store interface and the in-process implementation."""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional, Tuple

from ..models import Appointment, AppointmentStatus
from ..utils import utc_now
from .errors import SlotTakenError

logger = logging.getLogger(__name__)


class AppointmentStore(ABC):
    """
    Persistence contract for appointments.

    Implementations must guarantee that no write leaves two appointments with
    status "scheduled" on the same (doctor_name, date, time_slot). A write
    that would do so raises SlotTakenError instead.
    """

    @abstractmethod
    async def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get a specific appointment by ID."""

    @abstractmethod
    async def get_appointments_by_owner(self, owner_id: str) -> List[Appointment]:
        """Get every appointment a user booked, any status."""

    @abstractmethod
    async def get_booked_slots(
        self,
        doctor_name: str,
        day: date,
        exclude_id: Optional[str] = None,
    ) -> List[str]:
        """Slots taken on a day by appointments that are not cancelled."""

    @abstractmethod
    async def create_appointment(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment. Raises SlotTakenError if the slot is held."""

    @abstractmethod
    async def update_appointment(
        self,
        appointment_id: str,
        updates: dict,
        expected_status: Optional[AppointmentStatus] = AppointmentStatus.SCHEDULED,
    ) -> Optional[Appointment]:
        """
        Apply field updates if the appointment still has ``expected_status``.

        Returns:
            The updated appointment, or None if it is missing or its status
            changed in the meantime.

        Raises:
            SlotTakenError: If the update would double-book a slot.
        """

    @abstractmethod
    async def set_meet_link(self, appointment_id: str, meet_link: str) -> Optional[Appointment]:
        """
        Store a meeting link unless one is already set.

        Returns:
            The appointment as stored afterwards (carrying whichever link won),
            or None if it does not exist.
        """


class InMemoryAppointmentStore(AppointmentStore):
    """
    Process-local store for development and tests.

    A single asyncio.Lock serializes writes, and an index of active slots
    makes the double-booking check part of the same critical section.
    """

    def __init__(self):
        self._records: Dict[str, Appointment] = {}
        self._active: Dict[Tuple[str, date, str], str] = {}
        self._lock = asyncio.Lock()
        logger.info("In-memory appointment store initialized")

    async def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        record = self._records.get(appointment_id)
        return record.model_copy(deep=True) if record else None

    async def get_appointments_by_owner(self, owner_id: str) -> List[Appointment]:
        found = [a for a in self._records.values() if a.owner_id == owner_id]
        found.sort(key=lambda a: a.date)
        return [a.model_copy(deep=True) for a in found]

    async def get_booked_slots(
        self,
        doctor_name: str,
        day: date,
        exclude_id: Optional[str] = None,
    ) -> List[str]:
        return [
            a.time_slot
            for a in self._records.values()
            if a.doctor_name == doctor_name
            and a.date == day
            and a.status != AppointmentStatus.CANCELLED
            and a.id != exclude_id
        ]

    async def create_appointment(self, appointment: Appointment) -> Appointment:
        async with self._lock:
            key = appointment.slot_key
            if appointment.is_active and key in self._active:
                raise SlotTakenError(*key)

            now = utc_now()
            created = appointment.model_copy(
                update={"id": uuid.uuid4().hex, "created_at": now, "updated_at": now},
                deep=True,
            )
            self._records[created.id] = created
            if created.is_active:
                self._active[key] = created.id

            logger.info(f"Created appointment {created.id} for {created.owner_id}")
            return created.model_copy(deep=True)

    async def update_appointment(
        self,
        appointment_id: str,
        updates: dict,
        expected_status: Optional[AppointmentStatus] = AppointmentStatus.SCHEDULED,
    ) -> Optional[Appointment]:
        async with self._lock:
            current = self._records.get(appointment_id)
            if current is None:
                return None
            if expected_status is not None and current.status != expected_status:
                return None

            changes = dict(updates)
            changes["updated_at"] = utc_now()
            updated = current.model_copy(update=changes, deep=True)

            old_key = current.slot_key
            new_key = updated.slot_key
            if updated.is_active:
                holder = self._active.get(new_key)
                if holder is not None and holder != appointment_id:
                    raise SlotTakenError(*new_key)

            if current.is_active and self._active.get(old_key) == appointment_id:
                del self._active[old_key]
            if updated.is_active:
                self._active[new_key] = appointment_id

            self._records[appointment_id] = updated
            return updated.model_copy(deep=True)

    async def set_meet_link(self, appointment_id: str, meet_link: str) -> Optional[Appointment]:
        async with self._lock:
            current = self._records.get(appointment_id)
            if current is None:
                return None
            if current.meet_link:
                return current.model_copy(deep=True)

            updated = current.model_copy(
                update={"meet_link": meet_link, "updated_at": utc_now()},
                deep=True,
            )
            self._records[appointment_id] = updated
            return updated.model_copy(deep=True)
