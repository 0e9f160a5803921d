"""Availability lookups for a doctor's day."""

import logging
from datetime import date
from typing import Optional

from ..models import AvailabilityResult, DoctorCatalog
from .appointment_store import AppointmentStore
from .errors import ValidationError
from .slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Computes free and booked slots from the appointment store."""

    def __init__(
        self,
        store: AppointmentStore,
        slot_generator: SlotGenerator,
        catalog: Optional[DoctorCatalog] = None,
    ):
        self.store = store
        self.slots = slot_generator
        self.catalog = catalog

    def require_doctor(self, doctor_name: str) -> None:
        """Reject names missing from a non-empty catalog."""
        if self.catalog and doctor_name not in self.catalog:
            raise ValidationError(f"Unknown doctor: {doctor_name}")

    def require_slot(self, time_slot: Optional[str]) -> str:
        """Return the canonical slot label or raise ValidationError."""
        label = self.slots.normalize(time_slot)
        if label is None:
            raise ValidationError(
                f"Invalid time slot {time_slot!r}. Choose one of: {', '.join(self.slots.slots)}"
            )
        return label

    async def check(
        self,
        doctor_name: str,
        day: date,
        time_slot: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> AvailabilityResult:
        """
        Check a doctor's slots on a day.

        Args:
            doctor_name: Exact doctor name
            day: Calendar date
            time_slot: Optional slot to test; any accepted spelling
            exclude_id: Appointment to ignore (the one being rescheduled)

        Returns:
            AvailabilityResult. Without a time_slot, ``available`` reports
            whether any slot is free.
        """
        label = self.require_slot(time_slot) if time_slot else None

        booked = set(await self.store.get_booked_slots(doctor_name, day, exclude_id=exclude_id))
        free = self.slots.free_slots(booked)

        if label is None:
            available = bool(free)
        else:
            available = label not in booked

        return AvailabilityResult(
            doctor_name=doctor_name,
            date=day,
            time_slot=label,
            available=available,
            available_slots=free,
            booked_slots=sorted(booked, key=self.slots.sort_key),
        )
