"""Meeting links for scheduled appointments."""

import logging
import secrets
import time
from typing import Callable

from ..models import Appointment
from .appointment_store import AppointmentStore
from .errors import NotFoundError
from .lifecycle import load_owned_appointment

logger = logging.getLogger(__name__)

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


class MeetLinkIssuer:
    """Issues one opaque meeting link per appointment, on demand."""

    def __init__(
        self,
        store: AppointmentStore,
        base_url: str = "https://meet.google.com/lookup",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.clock = clock

    def generate_link(self) -> str:
        """Millisecond timestamp plus a random token, under the base URL."""
        code = f"{_base36(int(self.clock() * 1000))}-{secrets.token_urlsafe(9)}"
        return f"{self.base_url}/{code}"

    async def ensure_link(self, appointment_id: str, requester_id: str) -> Appointment:
        """
        Make sure the appointment has a meeting link, creating it on first use.

        Returns:
            The appointment carrying its link. Repeated calls return the
            same link.

        Raises:
            NotFoundError: Unknown appointment.
            ForbiddenError: Requester does not own it.
        """
        appointment = await load_owned_appointment(
            self.store, appointment_id, requester_id, "modify"
        )
        if appointment.meet_link:
            return appointment

        stored = await self.store.set_meet_link(appointment_id, self.generate_link())
        if stored is None or not stored.meet_link:
            raise NotFoundError("Appointment not found")

        logger.info(f"Meet link issued for appointment {appointment_id}")
        return stored
