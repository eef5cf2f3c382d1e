"""
Error kinds raised by the scheduling and billing services.

Every failure a caller can act upon has its own class with a stable
``code``.  The services never translate them into HTTP; that mapping
lives in :func:`api_exception_handler`, which DRF calls for any
exception escaping a view.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    code = 'clinic_error'
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class NotFoundError(ClinicError):
    code = 'not_found'
    http_status = status.HTTP_404_NOT_FOUND
    resource = 'resource'

    def __init__(self, resource_id):
        super().__init__(f'{self.resource} not found: {resource_id}', {'id': resource_id})
        self.resource_id = resource_id


class ShiftNotFound(NotFoundError):
    code = 'shift_not_found'
    resource = 'shift'


class AppointmentNotFound(NotFoundError):
    code = 'appointment_not_found'
    resource = 'appointment'


class InvoiceNotFound(NotFoundError):
    code = 'invoice_not_found'
    resource = 'invoice'


class PatientNotFound(NotFoundError):
    code = 'patient_not_found'
    resource = 'patient'


class DoctorNotFound(NotFoundError):
    code = 'doctor_not_found'
    resource = 'doctor'


class InvalidTimeSlot(ClinicError):
    code = 'invalid_time_slot'

    def __init__(self, start_at, end_at):
        super().__init__(
            'end time must be strictly after start time',
            {'startAt': start_at.isoformat(), 'endAt': end_at.isoformat()},
        )


class ShiftConflict(ClinicError):
    """The candidate window overlaps an existing shift of the same doctor."""
    code = 'shift_conflict'
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, doctor_id, conflicting):
        super().__init__(
            f'doctor {doctor_id} already has a shift from '
            f'{conflicting.start_at.isoformat()} to {conflicting.end_at.isoformat()}',
            {
                'doctorId': doctor_id,
                'conflictingShiftId': conflicting.id,
                'conflictingStartAt': conflicting.start_at.isoformat(),
                'conflictingEndAt': conflicting.end_at.isoformat(),
            },
        )
        self.conflicting = conflicting


class InvalidStateTransition(ClinicError):
    code = 'invalid_state_transition'
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, appointment_id, current: str, target: str):
        super().__init__(
            f'appointment {appointment_id} cannot move from {current} to {target}',
            {'id': appointment_id, 'currentStatus': current, 'targetStatus': target},
        )
        self.current = current
        self.target = target


class InvalidAppointment(ClinicError):
    code = 'invalid_appointment'


class AppointmentNotCompleted(ClinicError):
    code = 'appointment_not_completed'
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, appointment_id, current: str):
        super().__init__(
            f'cannot generate invoice for appointment {appointment_id} in status {current}',
            {'id': appointment_id, 'currentStatus': current},
        )


class InvoiceAlreadyExists(ClinicError):
    """Safe to treat as "already handled": fetch the existing invoice instead."""
    code = 'invoice_already_exists'
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, appointment_id, invoice_id=None):
        super().__init__(
            f'invoice already exists for appointment {appointment_id}',
            {'appointmentId': appointment_id, 'invoiceId': invoice_id},
        )


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicError):
        return Response(
            {'ok': False, 'error': {'code': exc.code, 'message': exc.message, 'detail': exc.detail}},
            status=exc.http_status,
        )
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get("request")
        logger.error("Unhandled error on %s", getattr(request, "path", "?"), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)
