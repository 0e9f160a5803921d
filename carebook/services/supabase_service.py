"""Supabase-backed appointment store."""

import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Optional, List
from postgrest.exceptions import APIError
from supabase import create_client, Client

from ..models import Appointment, AppointmentStatus
from ..utils import utc_now
from .appointment_store import AppointmentStore
from .errors import SlotTakenError, StorageError

logger = logging.getLogger(__name__)

# Postgres error codes surfaced through PostgREST
UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"

TABLE = "appointments"


def _to_column(value):
    """Convert a model value to its column representation."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


class SupabaseService(AppointmentStore):
    """
    Appointment store on a Supabase Postgres table.

    Double-booking is prevented by the partial unique index from
    migrations/001_create_appointments.sql; inserts and updates that hit it
    raise SlotTakenError.
    """

    def __init__(self, url: str, key: str, client: Optional[Client] = None):
        """Initialize Supabase client."""
        self.client: Client = client or create_client(url, key)
        logger.info("Supabase client initialized")

    async def _execute(self, query):
        """Run a query off the event loop; the Supabase client is synchronous."""
        return await asyncio.to_thread(query.execute)

    # ==================== Reads ====================

    async def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get a specific appointment by ID."""
        try:
            response = await self._execute(
                self.client.table(TABLE).select("*").eq("id", appointment_id).limit(1)
            )
        except APIError as e:
            if e.code == INVALID_TEXT_REPRESENTATION:
                return None
            logger.error(f"Error fetching appointment {appointment_id}: {e}")
            raise StorageError("Error fetching appointment") from e
        except Exception as e:
            logger.error(f"Error fetching appointment {appointment_id}: {e}")
            raise StorageError("Error fetching appointment") from e

        if response.data:
            return Appointment(**response.data[0])
        return None

    async def get_appointments_by_owner(self, owner_id: str) -> List[Appointment]:
        """Get appointments for a user."""
        try:
            response = await self._execute(
                self.client.table(TABLE)
                .select("*")
                .eq("owner_id", owner_id)
                .order("date", desc=False)
            )
            return [Appointment(**apt) for apt in response.data]
        except Exception as e:
            logger.error(f"Error fetching appointments for {owner_id}: {e}")
            raise StorageError("Error fetching appointments") from e

    async def get_booked_slots(
        self,
        doctor_name: str,
        day: date,
        exclude_id: Optional[str] = None,
    ) -> List[str]:
        """Slots taken on a day by appointments that are not cancelled."""
        try:
            query = (
                self.client.table(TABLE)
                .select("id, time_slot")
                .eq("doctor_name", doctor_name)
                .eq("date", day.isoformat())
                .neq("status", AppointmentStatus.CANCELLED.value)
            )
            if exclude_id:
                query = query.neq("id", exclude_id)
            response = await self._execute(query)
            return [row["time_slot"] for row in response.data]
        except Exception as e:
            logger.error(f"Error checking slot availability: {e}")
            raise StorageError("Error checking availability") from e

    # ==================== Writes ====================

    async def create_appointment(self, appointment: Appointment) -> Appointment:
        """Create a new appointment."""
        now = utc_now().isoformat()
        apt_data = {
            "owner_id": appointment.owner_id,
            "doctor_name": appointment.doctor_name,
            "specialization": appointment.specialization,
            "date": appointment.date.isoformat(),
            "time_slot": appointment.time_slot,
            "patient_name": appointment.patient_name,
            "patient_phone": appointment.patient_phone,
            "reason": appointment.reason,
            "status": _to_column(AppointmentStatus(appointment.status)),
            "meet_link": appointment.meet_link,
            "created_at": now,
            "updated_at": now,
        }

        try:
            response = await self._execute(self.client.table(TABLE).insert(apt_data))
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise SlotTakenError(*appointment.slot_key) from e
            logger.error(f"Error creating appointment: {e}")
            raise StorageError("Error booking appointment") from e
        except Exception as e:
            logger.error(f"Error creating appointment: {e}")
            raise StorageError("Error booking appointment") from e

        created = Appointment(**response.data[0])
        logger.info(f"Created appointment {created.id} for {created.owner_id}")
        return created

    async def update_appointment(
        self,
        appointment_id: str,
        updates: dict,
        expected_status: Optional[AppointmentStatus] = AppointmentStatus.SCHEDULED,
    ) -> Optional[Appointment]:
        """Update an appointment if its status is still the expected one."""
        row = {field: _to_column(value) for field, value in updates.items()}
        row["updated_at"] = utc_now().isoformat()

        try:
            query = self.client.table(TABLE).update(row).eq("id", appointment_id)
            if expected_status is not None:
                query = query.eq("status", expected_status.value)
            response = await self._execute(query)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise SlotTakenError(
                    updates.get("doctor_name", ""),
                    updates.get("date"),
                    updates.get("time_slot", ""),
                ) from e
            logger.error(f"Error updating appointment {appointment_id}: {e}")
            raise StorageError("Error updating appointment") from e
        except Exception as e:
            logger.error(f"Error updating appointment {appointment_id}: {e}")
            raise StorageError("Error updating appointment") from e

        if response.data:
            return Appointment(**response.data[0])
        return None

    async def set_meet_link(self, appointment_id: str, meet_link: str) -> Optional[Appointment]:
        """Store a meeting link unless one is already set."""
        try:
            response = await self._execute(
                self.client.table(TABLE)
                .update({"meet_link": meet_link, "updated_at": utc_now().isoformat()})
                .eq("id", appointment_id)
                .is_("meet_link", "null")
            )
        except Exception as e:
            logger.error(f"Error saving meet link for {appointment_id}: {e}")
            raise StorageError("Error creating meeting link") from e

        if response.data:
            return Appointment(**response.data[0])

        # Another request stored a link first, or the row does not exist
        return await self.get_appointment_by_id(appointment_id)
