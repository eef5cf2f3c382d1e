import pytest

from clinic.exceptions import DoctorNotFound, InvalidTimeSlot, ShiftConflict, ShiftNotFound
from clinic.models import Appointment, Shift
from clinic.services import appointments, shifts
from clinic.tests.utils import at

pytestmark = pytest.mark.django_db


def test_overlapping_shift_is_rejected(doctor):
    first = shifts.create_shift(doctor.id, at(13), at(15))
    with pytest.raises(ShiftConflict) as exc:
        shifts.create_shift(doctor.id, at(14), at(16))
    assert exc.value.conflicting.id == first.id
    assert exc.value.detail['conflictingShiftId'] == first.id
    assert Shift.objects.filter(doctor=doctor).count() == 1


def test_back_to_back_shifts_are_allowed(doctor):
    shifts.create_shift(doctor.id, at(13), at(15))
    second = shifts.create_shift(doctor.id, at(15), at(17))
    assert second.start_at == at(15)
    assert [s.id for s in shifts.list_shifts_for_doctor(doctor.id)][-1] == second.id


def test_end_before_start_is_invalid(doctor):
    with pytest.raises(InvalidTimeSlot):
        shifts.create_shift(doctor.id, at(10), at(9))
    assert not Shift.objects.exists()


def test_zero_length_shift_is_invalid(doctor):
    with pytest.raises(InvalidTimeSlot):
        shifts.create_shift(doctor.id, at(10), at(10))


def test_unknown_doctor(db):
    with pytest.raises(DoctorNotFound):
        shifts.create_shift(999, at(9), at(10))


def test_invalid_slot_checked_before_doctor(db):
    with pytest.raises(InvalidTimeSlot):
        shifts.create_shift(999, at(10), at(9))


def test_other_doctors_shifts_do_not_conflict(make_doctor):
    d1 = make_doctor('LIC-1')
    d2 = make_doctor('LIC-2')
    shifts.create_shift(d1.id, at(13), at(15))
    shifts.create_shift(d2.id, at(13), at(15))
    assert Shift.objects.count() == 2


def test_conflict_found_regardless_of_insertion_order(doctor):
    # the overlapping shift is neither the first nor the last by id or start
    shifts.create_shift(doctor.id, at(20), at(22))
    shifts.create_shift(doctor.id, at(8), at(9))
    middle = shifts.create_shift(doctor.id, at(12), at(14))
    shifts.create_shift(doctor.id, at(16), at(18))
    with pytest.raises(ShiftConflict) as exc:
        shifts.create_shift(doctor.id, at(13), at(15))
    assert exc.value.conflicting.id == middle.id


def test_containing_shift_conflicts(doctor):
    shifts.create_shift(doctor.id, at(12), at(13))
    with pytest.raises(ShiftConflict):
        shifts.create_shift(doctor.id, at(8), at(18))


def test_update_excludes_itself(doctor):
    shift = shifts.create_shift(doctor.id, at(13), at(15), room='A1')
    updated = shifts.update_shift(shift.id, doctor.id, at(14), at(16), room='B2')
    assert updated.id == shift.id
    assert (updated.start_at, updated.end_at, updated.room) == (at(14), at(16), 'B2')


def test_update_into_other_shift_conflicts(doctor):
    shifts.create_shift(doctor.id, at(9), at(11))
    shift = shifts.create_shift(doctor.id, at(13), at(15))
    with pytest.raises(ShiftConflict):
        shifts.update_shift(shift.id, doctor.id, at(10), at(14))
    shift.refresh_from_db()
    assert (shift.start_at, shift.end_at) == (at(13), at(15))


def test_update_moves_shift_to_other_doctor(make_doctor):
    d1 = make_doctor('LIC-1')
    d2 = make_doctor('LIC-2')
    shift = shifts.create_shift(d1.id, at(13), at(15))
    shifts.create_shift(d2.id, at(15), at(17))
    moved = shifts.update_shift(shift.id, d2.id, at(13), at(15))
    assert moved.doctor_id == d2.id
    assert shifts.list_shifts(doctor_id=d1.id) == []


def test_update_missing_shift(doctor):
    with pytest.raises(ShiftNotFound):
        shifts.update_shift(12345, doctor.id, at(9), at(10))


def test_update_invalid_slot(doctor):
    shift = shifts.create_shift(doctor.id, at(13), at(15))
    with pytest.raises(InvalidTimeSlot):
        shifts.update_shift(shift.id, doctor.id, at(15), at(13))


def test_get_returns_stored_values(doctor):
    shift = shifts.create_shift(doctor.id, at(13), at(15), room='  C3 ')
    fetched = shifts.get_shift(shift.id)
    assert fetched.doctor_id == doctor.id
    assert (fetched.start_at, fetched.end_at, fetched.room) == (at(13), at(15), 'C3')
    assert fetched.created_at is not None and fetched.updated_at is not None


def test_get_and_delete_missing(db):
    with pytest.raises(ShiftNotFound):
        shifts.get_shift(1)
    with pytest.raises(ShiftNotFound):
        shifts.delete_shift(1)


def test_deleting_shift_frees_the_window(doctor):
    shift = shifts.create_shift(doctor.id, at(13), at(15))
    shifts.delete_shift(shift.id)
    shifts.create_shift(doctor.id, at(13), at(15))
    assert Shift.objects.count() == 1


def test_deleting_shift_keeps_its_appointments(doctor, patient):
    shift = shifts.create_shift(doctor.id, at(13), at(15))
    appt = appointments.create_appointment(patient.id, doctor.id, shift_id=shift.id)
    shifts.delete_shift(shift.id)
    appt.refresh_from_db()
    assert appt.shift_id is None
    assert appt.status == Appointment.STATUS_SCHEDULED


def test_list_is_ordered_by_start(doctor):
    late = shifts.create_shift(doctor.id, at(16), at(17))
    early = shifts.create_shift(doctor.id, at(8), at(9))
    assert [s.id for s in shifts.list_shifts()] == [early.id, late.id]


def test_format_shift(doctor):
    shift = shifts.create_shift(doctor.id, at(13), at(15), room='A1')
    data = shifts.format_shift(shift)
    assert data['doctorId'] == doctor.id
    assert data['startAt'] == at(13).isoformat()
    assert data['room'] == 'A1'
