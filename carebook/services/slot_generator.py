"""Daily slot table for appointment times."""

import re
from datetime import datetime
from typing import Iterable, List, Optional


_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([ap]\.?m\.?)?\s*$", re.IGNORECASE)


class SlotGenerator:
    """Fixed, ordered enumeration of bookable slots in a day."""

    def __init__(self, slots: Iterable[str]):
        """
        Initialize the slot table.

        Args:
            slots: Slot labels in booking order, e.g. ["09:00 AM", "10:00 AM"].
                Labels must be "HH:MM AM/PM" with a leading zero.

        Raises:
            ValueError: If the table is empty, a label is malformed or repeated.
        """
        self.slots = tuple(slots)
        if not self.slots:
            raise ValueError("At least one time slot must be configured")

        self._positions = {}
        self._by_clock = {}
        for position, label in enumerate(self.slots):
            try:
                parsed = datetime.strptime(label, "%I:%M %p").time()
            except ValueError:
                raise ValueError(f"Invalid time slot label: {label!r}") from None
            if label in self._positions:
                raise ValueError(f"Duplicate time slot label: {label!r}")
            self._positions[label] = position
            self._by_clock[(parsed.hour, parsed.minute)] = label

    def normalize(self, value: Optional[str]) -> Optional[str]:
        """
        Map user input onto a canonical slot label.

        Accepts "10:00 AM", "10:00 am", "9:00 AM", "9:00am" and 24-hour "14:00".

        Returns:
            The canonical label, or None if the value is not a configured slot.
        """
        if not value or not isinstance(value, str):
            return None
        if value in self._positions:
            return value

        match = _TIME_RE.match(value)
        if not match:
            return None

        hour = int(match.group(1))
        minute = int(match.group(2))
        period = match.group(3)

        if period:
            if not 1 <= hour <= 12:
                return None
            is_pm = period.lower().startswith("p")
            if is_pm and hour < 12:
                hour += 12
            elif not is_pm and hour == 12:
                hour = 0

        return self._by_clock.get((hour, minute))

    def sort_key(self, label: str) -> int:
        """Position of a slot in the day; unknown labels sort last."""
        return self._positions.get(label, len(self.slots))

    def free_slots(self, booked: Iterable[str]) -> List[str]:
        """All slots minus the booked ones, in table order."""
        booked_set = set(booked)
        return [slot for slot in self.slots if slot not in booked_set]

    def format_slots(self, slots: List[str], max_slots: int = 5) -> str:
        """
        Format slots for a user-facing message.

        Args:
            slots: Slot labels
            max_slots: Maximum slots to spell out

        Returns:
            Human-readable string
        """
        if not slots:
            return "no free slots"

        shown = slots[:max_slots]
        if len(shown) == 1:
            text = shown[0]
        else:
            text = ", ".join(shown[:-1]) + f" or {shown[-1]}"

        if len(slots) > max_slots:
            text += f" (and {len(slots) - max_slots} more)"
        return text
