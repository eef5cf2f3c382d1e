"""
Appointment endpoints.

Bookings are created in ``SCHEDULED`` and moved through the lifecycle
with the ``complete`` and ``cancel`` actions.  Completing returns the
invoice produced by the billing engine in the same response.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..permissions import IsSchedulingStaff, IsSchedulingStaffOrReadOnly
from ..serializers.scheduling import (
    AppointmentCancelSerializer,
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentRescheduleSerializer,
)
from ..services import appointments as appointment_service
from ..services import billing as billing_service


@api_view(['GET', 'POST'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def appointments_list(request):
    if request.method == 'GET':
        q = AppointmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        items = appointment_service.list_appointments(
            patient_id=q.validated_data.get('patientId'),
            doctor_id=q.validated_data.get('doctorId'),
            status=q.validated_data.get('status'),
        )
        return Response({'ok': True, 'data': [appointment_service.format_appointment(a) for a in items]})
    # POST
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = appointment_service.create_appointment(
        s.validated_data['patientId'],
        s.validated_data['doctorId'],
        scheduled_at=s.validated_data.get('scheduledAt'),
        shift_id=s.validated_data.get('shiftId'),
        notes=s.validated_data.get('notes', ''),
        operator=request.user,
    )
    return Response(
        {'ok': True, 'data': appointment_service.format_appointment(appointment)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def appointment_detail(request, pk: int):
    if request.method == 'GET':
        appointment = appointment_service.get_appointment(pk)
        return Response({'ok': True, 'data': appointment_service.format_appointment(appointment)})
    if request.method == 'PUT':
        s = AppointmentRescheduleSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        appointment = appointment_service.reschedule_appointment(
            pk,
            scheduled_at=s.validated_data.get('scheduledAt'),
            shift_id=s.validated_data.get('shiftId'),
            notes=s.validated_data.get('notes'),
            detach_shift='shiftId' in s.validated_data and s.validated_data['shiftId'] is None,
        )
        return Response({'ok': True, 'data': appointment_service.format_appointment(appointment)})
    # DELETE
    appointment_service.delete_appointment(pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsSchedulingStaff])
def appointment_complete(request, pk: int):
    appointment = appointment_service.complete_appointment(pk, operator=request.user)
    invoice = billing_service.get_invoice_for_appointment(appointment.id)
    return Response({
        'ok': True,
        'data': appointment_service.format_appointment(appointment),
        'invoice': billing_service.format_invoice(invoice),
    })


@api_view(['POST'])
@permission_classes([IsSchedulingStaff])
def appointment_cancel(request, pk: int):
    s = AppointmentCancelSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = appointment_service.cancel_appointment(
        pk, operator=request.user, reason=s.validated_data.get('reason', ''),
    )
    return Response({'ok': True, 'data': appointment_service.format_appointment(appointment)})


@api_view(['GET'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def appointment_history(request, pk: int):
    items = appointment_service.appointment_history(pk)
    return Response({'ok': True, 'data': [appointment_service.format_transition(t) for t in items]})


@api_view(['GET'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def appointment_by_reference(request, reference):
    appointment = appointment_service.get_appointment_by_reference(reference)
    return Response({'ok': True, 'data': appointment_service.format_appointment(appointment)})
