"""
Appointment lifecycle.

An appointment starts in ``SCHEDULED`` and moves exactly once, either to
``COMPLETED`` or to ``CANCELLED``; both are terminal.  Every transition
locks the appointment row, validates the move centrally in
:func:`_transition`, stamps the timestamps and appends an
:class:`~clinic.models.AppointmentTransition` row.

Completing an appointment sends :data:`clinic.signals.appointment_completed`
inside the same transaction; the billing receiver creates the invoice
there, so a completion is never committed without its invoice.
"""
import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic.exceptions import (
    AppointmentNotFound,
    DoctorNotFound,
    InvalidAppointment,
    InvalidStateTransition,
    PatientNotFound,
    ShiftNotFound,
)
from clinic.models import Appointment, AppointmentTransition, Shift
from clinic.services import directory
from clinic.services.events import broadcast_on_commit
from clinic.signals import appointment_completed

logger = logging.getLogger(__name__)

User = get_user_model()

ALLOWED_TRANSITIONS = {
    Appointment.STATUS_SCHEDULED: (Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED),
    Appointment.STATUS_COMPLETED: (),
    Appointment.STATUS_CANCELLED: (),
}


def can_transition(current: str, new: str) -> bool:
    """Return True if an appointment may move from ``current`` to ``new``."""
    return new in ALLOWED_TRANSITIONS.get(current, ())


def _operator_or_none(operator):
    return operator if isinstance(operator, User) and operator.pk else None


def _resolve_slot(doctor_id, scheduled_at, shift_id):
    """Return ``(shift, scheduled_at)`` for a booking request.

    A shift alone books its start time; an explicit time inside a shift
    must fall within the shift window.
    """
    if shift_id is None:
        if scheduled_at is None:
            raise InvalidAppointment('either scheduledAt or shiftId is required')
        return None, scheduled_at
    shift = Shift.objects.filter(id=shift_id).first()
    if shift is None:
        raise ShiftNotFound(shift_id)
    if shift.doctor_id != doctor_id:
        raise InvalidAppointment(
            f'shift {shift.id} belongs to doctor {shift.doctor_id}, not {doctor_id}',
            {'shiftId': shift.id, 'shiftDoctorId': shift.doctor_id, 'doctorId': doctor_id},
        )
    if scheduled_at is None:
        return shift, shift.start_at
    if not (shift.start_at <= scheduled_at < shift.end_at):
        raise InvalidAppointment(
            'scheduledAt is outside the shift window',
            {'shiftId': shift.id, 'startAt': shift.start_at.isoformat(), 'endAt': shift.end_at.isoformat()},
        )
    return shift, scheduled_at


def _lock(appointment_id) -> Appointment:
    appointment = Appointment.objects.select_for_update().filter(id=appointment_id).first()
    if appointment is None:
        raise AppointmentNotFound(appointment_id)
    return appointment


def _transition(appointment: Appointment, new_status: str, *, operator=None, reason: str = '') -> Appointment:
    old_status = appointment.status
    if not can_transition(old_status, new_status):
        logger.warning("Rejected transition of appointment %s: %s -> %s", appointment.id, old_status, new_status)
        raise InvalidStateTransition(appointment.id, old_status, new_status)
    now = timezone.now()
    appointment.status = new_status
    if new_status == Appointment.STATUS_COMPLETED:
        appointment.completed_at = now
    appointment.updated_at = now
    appointment.save(update_fields=['status', 'completed_at', 'updated_at'])
    AppointmentTransition.objects.create(
        appointment=appointment,
        from_status=old_status,
        to_status=new_status,
        operator=_operator_or_none(operator),
        timestamp=now,
        reason=reason,
    )
    return appointment


@transaction.atomic
def create_appointment(patient_id, doctor_id, scheduled_at=None, shift_id=None,
                       notes: str = '', operator=None) -> Appointment:
    if not directory.patient_exists(patient_id):
        raise PatientNotFound(patient_id)
    if not directory.doctor_exists(doctor_id):
        raise DoctorNotFound(doctor_id)
    shift, scheduled_at = _resolve_slot(doctor_id, scheduled_at, shift_id)
    now = timezone.now()
    appointment = Appointment.objects.create(
        patient_id=patient_id,
        doctor_id=doctor_id,
        shift=shift,
        scheduled_at=scheduled_at,
        status=Appointment.STATUS_SCHEDULED,
        notes=notes or '',
        created_at=now,
        updated_at=now,
    )
    logger.info(
        "Appointment %s created for patient %s with doctor %s at %s (shift %s) by %s",
        appointment.id, patient_id, doctor_id, scheduled_at, shift.id if shift else None,
        getattr(_operator_or_none(operator), "username", "system"),
    )
    return appointment


@transaction.atomic
def complete_appointment(appointment_id, operator=None) -> Appointment:
    appointment = _lock(appointment_id)
    _transition(appointment, Appointment.STATUS_COMPLETED, operator=operator, reason='completed')
    logger.info("Appointment %s completed at %s; billing triggered", appointment.id, appointment.completed_at)
    appointment_completed.send(sender=Appointment, appointment=appointment)
    broadcast_on_commit('appointment.completed', {
        'appointmentId': appointment.id,
        'reference': str(appointment.reference),
        'completedAt': appointment.completed_at.isoformat(),
    })
    return appointment


@transaction.atomic
def cancel_appointment(appointment_id, operator=None, reason: str = '') -> Appointment:
    appointment = _lock(appointment_id)
    _transition(appointment, Appointment.STATUS_CANCELLED, operator=operator, reason=reason or 'cancelled')
    logger.info("Appointment %s cancelled", appointment.id)
    return appointment


@transaction.atomic
def reschedule_appointment(appointment_id, scheduled_at=None, shift_id=None, notes: Optional[str] = None,
                           *, detach_shift: bool = False) -> Appointment:
    """Move or annotate a scheduled appointment.

    Fields left as ``None`` keep their current value: a new time alone
    must still fall inside the linked shift, and a notes-only edit keeps
    the slot.  ``detach_shift`` unlinks the shift explicitly.
    """
    appointment = _lock(appointment_id)
    if appointment.status != Appointment.STATUS_SCHEDULED:
        raise InvalidStateTransition(appointment.id, appointment.status, Appointment.STATUS_SCHEDULED)
    if scheduled_at is None and shift_id is None and not detach_shift:
        shift, scheduled_at = appointment.shift, appointment.scheduled_at
    else:
        if shift_id is None and not detach_shift:
            shift_id = appointment.shift_id
        if scheduled_at is None and shift_id is None:
            scheduled_at = appointment.scheduled_at
        shift, scheduled_at = _resolve_slot(appointment.doctor_id, scheduled_at, shift_id)
    appointment.shift = shift
    appointment.scheduled_at = scheduled_at
    if notes is not None:
        appointment.notes = notes
    appointment.updated_at = timezone.now()
    appointment.save(update_fields=['shift', 'scheduled_at', 'notes', 'updated_at'])
    logger.info("Appointment %s rescheduled to %s", appointment.id, scheduled_at)
    return appointment


@transaction.atomic
def delete_appointment(appointment_id) -> None:
    appointment = _lock(appointment_id)
    # Completed appointments carry an invoice and stay on record
    if appointment.status == Appointment.STATUS_COMPLETED:
        raise InvalidStateTransition(appointment.id, appointment.status, 'DELETED')
    appointment.delete()
    logger.info("Appointment %s deleted", appointment_id)


def get_appointment(appointment_id) -> Appointment:
    try:
        return Appointment.objects.select_related('patient', 'doctor').get(id=appointment_id)
    except Appointment.DoesNotExist:
        raise AppointmentNotFound(appointment_id) from None


def get_appointment_by_reference(reference) -> Appointment:
    """Look up an appointment by the public token handed to clients."""
    appointment = Appointment.objects.select_related('patient', 'doctor').filter(reference=reference).first()
    if appointment is None:
        raise AppointmentNotFound(str(reference))
    return appointment


def list_appointments(*, patient_id=None, doctor_id=None, status: Optional[str] = None) -> list[Appointment]:
    qs = Appointment.objects.select_related('patient', 'doctor')
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if doctor_id is not None:
        qs = qs.filter(doctor_id=doctor_id)
    if status:
        qs = qs.filter(status=status)
    return list(qs.order_by('scheduled_at', 'id'))


def appointment_history(appointment_id) -> list[AppointmentTransition]:
    if not Appointment.objects.filter(id=appointment_id).exists():
        raise AppointmentNotFound(appointment_id)
    return list(
        AppointmentTransition.objects.select_related('operator')
        .filter(appointment_id=appointment_id)
        .order_by('timestamp', 'id')
    )


def format_appointment(appointment: Appointment) -> dict:
    return {
        'id': appointment.id,
        'reference': str(appointment.reference),
        'patientId': appointment.patient_id,
        'doctorId': appointment.doctor_id,
        'shiftId': appointment.shift_id,
        'scheduledAt': appointment.scheduled_at.isoformat(),
        'status': appointment.status,
        'completedAt': appointment.completed_at.isoformat() if appointment.completed_at else None,
        'notes': appointment.notes,
        'createdAt': appointment.created_at.isoformat(),
        'updatedAt': appointment.updated_at.isoformat(),
    }


def format_transition(t: AppointmentTransition) -> dict:
    return {
        'from': t.from_status,
        'to': t.to_status,
        'operator': t.operator.username if t.operator else '',
        'timestamp': t.timestamp.isoformat(),
        'reason': t.reason,
    }
