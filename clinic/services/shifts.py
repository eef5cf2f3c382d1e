"""
Shift registry.

Creates, updates and removes doctor shifts while keeping every doctor's
shifts pairwise non-overlapping.  The conflict check and the write run
in one transaction that holds a row lock on the doctor, so two requests
for the same doctor cannot both pass the check before either has
written.
"""
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from clinic.exceptions import DoctorNotFound, InvalidTimeSlot, ShiftConflict, ShiftNotFound
from clinic.models import Doctor, Shift
from clinic.services.intervals import overlaps

logger = logging.getLogger(__name__)


def _validate_time_slot(start_at, end_at) -> None:
    if end_at <= start_at:
        logger.warning("Invalid time slot: start=%s end=%s", start_at, end_at)
        raise InvalidTimeSlot(start_at, end_at)


def _lock_doctor(doctor_id) -> Doctor:
    doctor = Doctor.objects.select_for_update().filter(id=doctor_id).first()
    if doctor is None:
        raise DoctorNotFound(doctor_id)
    return doctor


def find_conflicting_shift(doctor_id, start_at, end_at, *, exclude_shift_id=None) -> Optional[Shift]:
    """Return the first shift of ``doctor_id`` overlapping ``[start_at, end_at)``.

    Every shift of the doctor is compared; the one being updated is
    skipped when ``exclude_shift_id`` is given.
    """
    qs = Shift.objects.filter(doctor_id=doctor_id)
    if exclude_shift_id is not None:
        qs = qs.exclude(id=exclude_shift_id)
    for existing in qs.order_by('start_at', 'id'):
        if overlaps(start_at, end_at, existing.start_at, existing.end_at):
            return existing
    return None


def _ensure_no_conflict(doctor_id, start_at, end_at, exclude_shift_id=None) -> None:
    conflict = find_conflicting_shift(doctor_id, start_at, end_at, exclude_shift_id=exclude_shift_id)
    if conflict is not None:
        logger.warning(
            "Shift conflict for doctor %s: %s~%s overlaps shift %s (%s~%s)",
            doctor_id, start_at, end_at, conflict.id, conflict.start_at, conflict.end_at,
        )
        raise ShiftConflict(doctor_id, conflict)


@transaction.atomic
def create_shift(doctor_id, start_at, end_at, room: str = '') -> Shift:
    _validate_time_slot(start_at, end_at)
    doctor = _lock_doctor(doctor_id)
    _ensure_no_conflict(doctor.id, start_at, end_at)
    now = timezone.now()
    shift = Shift.objects.create(
        doctor=doctor,
        start_at=start_at,
        end_at=end_at,
        room=(room or '').strip(),
        created_at=now,
        updated_at=now,
    )
    logger.info("Shift %s created for doctor %s (%s~%s)", shift.id, doctor.id, start_at, end_at)
    return shift


@transaction.atomic
def update_shift(shift_id, doctor_id, start_at, end_at, room: str = '') -> Shift:
    if not Shift.objects.filter(id=shift_id).exists():
        raise ShiftNotFound(shift_id)
    _validate_time_slot(start_at, end_at)
    # Lock order is doctor, then shift.  Moving a shift away from a doctor
    # cannot create a conflict for them, so only the target doctor is locked.
    doctor = _lock_doctor(doctor_id)
    shift = Shift.objects.select_for_update().filter(id=shift_id).first()
    if shift is None:
        raise ShiftNotFound(shift_id)
    _ensure_no_conflict(doctor.id, start_at, end_at, exclude_shift_id=shift.id)
    shift.doctor = doctor
    shift.start_at = start_at
    shift.end_at = end_at
    shift.room = (room or '').strip()
    shift.updated_at = timezone.now()
    shift.save(update_fields=['doctor', 'start_at', 'end_at', 'room', 'updated_at'])
    logger.info("Shift %s updated for doctor %s (%s~%s)", shift.id, doctor.id, start_at, end_at)
    return shift


def delete_shift(shift_id) -> None:
    deleted, _ = Shift.objects.filter(id=shift_id).delete()
    if not deleted:
        raise ShiftNotFound(shift_id)
    logger.info("Shift %s deleted", shift_id)


def get_shift(shift_id) -> Shift:
    try:
        return Shift.objects.select_related('doctor').get(id=shift_id)
    except Shift.DoesNotExist:
        raise ShiftNotFound(shift_id) from None


def list_shifts(doctor_id=None) -> list[Shift]:
    qs = Shift.objects.select_related('doctor')
    if doctor_id is not None:
        qs = qs.filter(doctor_id=doctor_id)
    return list(qs.order_by('start_at', 'id'))


def list_shifts_for_doctor(doctor_id) -> list[Shift]:
    return list_shifts(doctor_id=doctor_id)


def format_shift(shift: Shift) -> dict:
    return {
        'id': shift.id,
        'doctorId': shift.doctor_id,
        'startAt': shift.start_at.isoformat(),
        'endAt': shift.end_at.isoformat(),
        'room': shift.room,
        'createdAt': shift.created_at.isoformat(),
        'updatedAt': shift.updated_at.isoformat(),
    }
