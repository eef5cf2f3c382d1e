"""
Doctor and patient directory endpoints.

Only the operations the scheduling core needs are exposed: listing,
registering and fetching single records.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..permissions import IsSchedulingStaffOrReadOnly
from ..serializers.directory import (
    DoctorCreateSerializer,
    DoctorListQuerySerializer,
    PatientCreateSerializer,
    PatientListQuerySerializer,
)
from ..services import directory


@api_view(['GET', 'POST'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def doctors_list(request):
    """List doctors or register a new one.

    Query params:
      - q: optional search (name/license contains)
      - specialization: exact match
      - onDutyOnly: 1|0  (only doctors with a shift covering now)
    """
    if request.method == 'GET':
        q = DoctorListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        doctors = directory.list_doctors(
            q=q.validated_data.get('q'),
            specialization=q.validated_data.get('specialization'),
            on_duty_only=q.validated_data.get('onDutyOnly', False),
        )
        return Response({'ok': True, 'data': [directory.format_doctor(d) for d in doctors]})
    s = DoctorCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = directory.create_doctor(
        full_name=s.validated_data['fullName'],
        license_number=s.validated_data['licenseNumber'],
        specialization=s.validated_data['specialization'],
        department=s.validated_data.get('department', ''),
    )
    return Response({'ok': True, 'data': directory.format_doctor(doctor)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def doctor_detail(request, pk: int):
    return Response({'ok': True, 'data': directory.format_doctor(directory.get_doctor(pk))})


@api_view(['GET', 'POST'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def patients_list(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        patients = directory.list_patients(q=q.validated_data.get('q'))
        return Response({'ok': True, 'data': [directory.format_patient(p) for p in patients]})
    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = directory.create_patient(
        first_name=s.validated_data['firstName'],
        last_name=s.validated_data['lastName'],
        date_of_birth=s.validated_data.get('dateOfBirth'),
        gender=s.validated_data.get('gender', ''),
        phone=s.validated_data.get('phone', ''),
        email=s.validated_data.get('email', ''),
    )
    return Response({'ok': True, 'data': directory.format_patient(patient)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsSchedulingStaffOrReadOnly])
def patient_detail(request, pk: int):
    return Response({'ok': True, 'data': directory.format_patient(directory.get_patient(pk))})
