"""
Shift endpoints.

Thin adapters over :mod:`clinic.services.shifts`: they validate the
request shape, call the registry and serialise the result.  Conflicts,
invalid windows and missing records are raised by the service as
:class:`~clinic.exceptions.ClinicError` and mapped to HTTP responses by
the project exception handler.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..permissions import IsSchedulingStaffOrReadOnly
from ..serializers.scheduling import ShiftListQuerySerializer, ShiftWriteSerializer
from ..services import shifts as shift_service


@api_view(['GET', 'POST'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def shifts_list(request):
    if request.method == 'GET':
        q = ShiftListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        items = shift_service.list_shifts(doctor_id=q.validated_data.get('doctorId'))
        return Response({'ok': True, 'data': [shift_service.format_shift(s) for s in items]})
    # POST
    s = ShiftWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    shift = shift_service.create_shift(
        s.validated_data['doctorId'],
        s.validated_data['startAt'],
        s.validated_data['endAt'],
        s.validated_data.get('room', ''),
    )
    return Response({'ok': True, 'data': shift_service.format_shift(shift)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def shift_detail(request, pk: int):
    if request.method == 'GET':
        return Response({'ok': True, 'data': shift_service.format_shift(shift_service.get_shift(pk))})
    if request.method == 'PUT':
        s = ShiftWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        shift = shift_service.update_shift(
            pk,
            s.validated_data['doctorId'],
            s.validated_data['startAt'],
            s.validated_data['endAt'],
            s.validated_data.get('room', ''),
        )
        return Response({'ok': True, 'data': shift_service.format_shift(shift)})
    # DELETE
    shift_service.delete_shift(pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
