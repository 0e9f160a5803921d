"""Doctor catalog models."""

from typing import Iterable, List
from pydantic import BaseModel, Field


class Doctor(BaseModel):
    """A bookable provider. Static configuration, never persisted."""
    name: str = Field(..., description="Display name, used as the booking key")
    specialization: str = Field(...)
    shift: str = Field(..., description="Shift window label, e.g. '3:00 PM - 6:00 PM'")

    class Config:
        frozen = True


DEFAULT_DOCTORS = (
    Doctor(name="Dr. Naresh", specialization="Cardiology", shift="12:00 AM - 3:00 AM"),
    Doctor(name="Dr. Suresh", specialization="Cardiology", shift="3:00 AM - 6:00 AM"),
    Doctor(name="Dr. Siva", specialization="Orthopedics", shift="6:00 AM - 9:00 AM"),
    Doctor(name="Dr. Balu", specialization="Orthopedics", shift="9:00 AM - 12:00 PM"),
    Doctor(name="Dr. Raju", specialization="Neurology", shift="12:00 PM - 3:00 PM"),
    Doctor(name="Dr. Harsha", specialization="Neurology", shift="3:00 PM - 6:00 PM"),
    Doctor(name="Dr. Santhosh", specialization="Pediatrics", shift="6:00 PM - 9:00 PM"),
    Doctor(name="Dr. Mahesh", specialization="Pediatrics", shift="9:00 PM - 12:00 AM"),
)


class DoctorCatalog:
    """Immutable lookup table of doctors keyed by exact name."""

    def __init__(self, doctors: Iterable[Doctor] = DEFAULT_DOCTORS):
        self._doctors = tuple(doctors)
        self._by_name = {d.name: d for d in self._doctors}

    def __len__(self) -> int:
        return len(self._doctors)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def all(self) -> List[Doctor]:
        return list(self._doctors)

    def by_specialization(self, specialization: str) -> List[Doctor]:
        """Doctors whose specialization matches, case-insensitive."""
        wanted = specialization.strip().lower()
        return [d for d in self._doctors if d.specialization.lower() == wanted]
