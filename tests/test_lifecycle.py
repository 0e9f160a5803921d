from datetime import date

import pytest

from carebook.models import AppointmentStatus
from carebook.services.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PastAppointmentError,
    ValidationError,
)
from conftest import TODAY


class TestCancel:
    """Cancel transitions."""

    async def test_cancel_marks_cancelled_and_keeps_record(self, book, lifecycle, store):
        appointment = await book()

        cancelled = await lifecycle.cancel(appointment.id, "user-a")

        assert cancelled.status == AppointmentStatus.CANCELLED
        stored = await store.get_appointment_by_id(appointment.id)
        assert stored is not None
        assert stored.status == AppointmentStatus.CANCELLED

    async def test_cancel_frees_the_slot(self, book, lifecycle):
        appointment = await book()
        await lifecycle.cancel(appointment.id, "user-a")

        rebooked = await book("user-b", patientName="Bob")

        assert rebooked.status == AppointmentStatus.SCHEDULED

    async def test_unknown_appointment_is_not_found(self, lifecycle):
        with pytest.raises(NotFoundError):
            await lifecycle.cancel("missing", "user-a")

    async def test_other_user_is_forbidden_and_nothing_changes(self, book, lifecycle, store):
        appointment = await book()

        with pytest.raises(ForbiddenError):
            await lifecycle.cancel(appointment.id, "user-b")

        stored = await store.get_appointment_by_id(appointment.id)
        assert stored.status == AppointmentStatus.SCHEDULED

    async def test_past_appointment_cannot_be_cancelled(self, book, lifecycle):
        appointment = await book(date="2025-02-28")

        with pytest.raises(PastAppointmentError):
            await lifecycle.cancel(appointment.id, "user-a")

    async def test_appointment_today_can_be_cancelled(self, book, lifecycle):
        appointment = await book(date=TODAY.isoformat())

        cancelled = await lifecycle.cancel(appointment.id, "user-a")

        assert cancelled.status == AppointmentStatus.CANCELLED

    async def test_repeated_cancel_is_a_no_op_success(self, book, lifecycle, store):
        appointment = await book()
        first = await lifecycle.cancel(appointment.id, "user-a")

        second = await lifecycle.cancel(appointment.id, "user-a")

        assert second.status == AppointmentStatus.CANCELLED
        assert second.updated_at == first.updated_at

    async def test_repeated_cancel_still_checks_ownership(self, book, lifecycle):
        appointment = await book()
        await lifecycle.cancel(appointment.id, "user-a")

        with pytest.raises(ForbiddenError):
            await lifecycle.cancel(appointment.id, "user-b")

    async def test_completed_appointment_cannot_be_cancelled(self, book, lifecycle, store):
        appointment = await book()
        await store.update_appointment(appointment.id, {"status": AppointmentStatus.COMPLETED})

        with pytest.raises(InvalidStateError):
            await lifecycle.cancel(appointment.id, "user-a")


class TestReschedule:
    """Reschedule transitions."""

    async def test_reschedule_moves_appointment_in_place(self, book, lifecycle, availability):
        appointment = await book()

        moved = await lifecycle.reschedule(appointment.id, "user-a", "2025-03-11", "02:00 PM")

        assert moved.id == appointment.id
        assert moved.date == date(2025, 3, 11)
        assert moved.time_slot == "02:00 PM"
        assert moved.status == AppointmentStatus.SCHEDULED
        assert moved.patient_name == "Alice"

        old_slot = await availability.check("Dr. Harsha", date(2025, 3, 10), "10:00 AM")
        new_slot = await availability.check("Dr. Harsha", date(2025, 3, 11), "02:00 PM")
        assert old_slot.available is True
        assert new_slot.available is False

    async def test_reschedule_to_own_slot_succeeds(self, book, lifecycle):
        appointment = await book()

        moved = await lifecycle.reschedule(appointment.id, "user-a", "2025-03-10", "10:00 AM")

        assert moved.time_slot == "10:00 AM"
        assert moved.date == date(2025, 3, 10)

    async def test_reschedule_into_taken_slot_conflicts(self, book, lifecycle, store):
        appointment = await book()
        await book("user-b", timeSlot="11:00 AM", patientName="Bob")

        with pytest.raises(ConflictError):
            await lifecycle.reschedule(appointment.id, "user-a", "2025-03-10", "11:00 AM")

        stored = await store.get_appointment_by_id(appointment.id)
        assert stored.time_slot == "10:00 AM"

    async def test_slot_taken_at_write_time_conflicts(self, book, lifecycle, store, monkeypatch):
        appointment = await book()
        other = await book("user-b", timeSlot="02:00 PM", patientName="Bob")

        async def nothing_booked(*args, **kwargs):
            return []

        # availability reports the slot free; the write still hits the taken slot
        monkeypatch.setattr(store, "get_booked_slots", nothing_booked)

        with pytest.raises(ConflictError):
            await lifecycle.reschedule(appointment.id, "user-a", "2025-03-10", "02:00 PM")

        stored = await store.get_appointment_by_id(appointment.id)
        assert stored.date == date(2025, 3, 10)
        assert stored.time_slot == "10:00 AM"
        assert stored.status == AppointmentStatus.SCHEDULED
        holder = await store.get_appointment_by_id(other.id)
        assert holder.time_slot == "02:00 PM"

    async def test_reschedule_into_slot_freed_by_cancel(self, book, lifecycle):
        appointment = await book()
        other = await book("user-b", timeSlot="11:00 AM", patientName="Bob")
        await lifecycle.cancel(other.id, "user-b")

        moved = await lifecycle.reschedule(appointment.id, "user-a", "2025-03-10", "11:00 AM")

        assert moved.time_slot == "11:00 AM"

    async def test_yesterdays_appointment_cannot_be_rescheduled(self, book, lifecycle):
        appointment = await book(date="2025-02-28")

        with pytest.raises(PastAppointmentError):
            await lifecycle.reschedule(appointment.id, "user-a", "2025-03-12", "09:00 AM")

        # regardless of the requested slot
        with pytest.raises(PastAppointmentError):
            await lifecycle.reschedule(appointment.id, "user-a", "garbage", "07:00 PM")

    async def test_other_user_is_forbidden_and_nothing_changes(self, book, lifecycle, store):
        appointment = await book()

        with pytest.raises(ForbiddenError):
            await lifecycle.reschedule(appointment.id, "user-b", "2025-03-11", "02:00 PM")

        stored = await store.get_appointment_by_id(appointment.id)
        assert stored.date == date(2025, 3, 10)
        assert stored.time_slot == "10:00 AM"

    async def test_unknown_appointment_is_not_found(self, lifecycle):
        with pytest.raises(NotFoundError):
            await lifecycle.reschedule("missing", "user-a", "2025-03-11", "02:00 PM")

    async def test_cancelled_appointment_cannot_be_rescheduled(self, book, lifecycle):
        appointment = await book()
        await lifecycle.cancel(appointment.id, "user-a")

        with pytest.raises(InvalidStateError):
            await lifecycle.reschedule(appointment.id, "user-a", "2025-03-11", "02:00 PM")

    @pytest.mark.parametrize(
        "new_date, new_slot",
        [(None, "02:00 PM"), ("2025-03-11", None), ("nope", "02:00 PM"), ("2025-03-11", "07:00 PM")],
    )
    async def test_invalid_targets_are_validation_errors(self, book, lifecycle, new_date, new_slot):
        appointment = await book()

        with pytest.raises(ValidationError):
            await lifecycle.reschedule(appointment.id, "user-a", new_date, new_slot)

    async def test_cannot_move_into_the_past(self, book, lifecycle):
        appointment = await book()

        with pytest.raises(ValidationError):
            await lifecycle.reschedule(appointment.id, "user-a", "2025-02-20", "02:00 PM")

    async def test_details_are_refreshed_when_provided(self, book, lifecycle):
        appointment = await book()

        moved = await lifecycle.reschedule(
            appointment.id,
            "user-a",
            "2025-03-11",
            "02:00 PM",
            details={"patientPhone": "+15550199", "reason": "  "},
        )

        assert moved.patient_phone == "+15550199"
        assert moved.reason == "Migraine follow-up"
        assert moved.doctor_name == "Dr. Harsha"

    async def test_changing_doctor_checks_the_new_doctors_slot(self, book, lifecycle):
        appointment = await book()
        await book("user-b", doctorName="Dr. Raju", timeSlot="02:00 PM", patientName="Bob")

        with pytest.raises(ConflictError):
            await lifecycle.reschedule(
                appointment.id,
                "user-a",
                "2025-03-10",
                "02:00 PM",
                details={"doctorName": "Dr. Raju", "specialization": "Neurology"},
            )

        moved = await lifecycle.reschedule(
            appointment.id,
            "user-a",
            "2025-03-10",
            "03:00 PM",
            details={"doctorName": "Dr. Raju"},
        )
        assert moved.doctor_name == "Dr. Raju"
        assert moved.time_slot == "03:00 PM"
