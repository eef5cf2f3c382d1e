import logging
from typing import Optional

from django.db.models import Q
from django.utils import timezone

from clinic.exceptions import DoctorNotFound, PatientNotFound
from clinic.models import Doctor, Patient

logger = logging.getLogger(__name__)


def doctor_exists(doctor_id) -> bool:
    return Doctor.objects.filter(id=doctor_id).exists()


def patient_exists(patient_id) -> bool:
    return Patient.objects.filter(id=patient_id).exists()


def specialization_of(doctor_id) -> str:
    specialization = Doctor.objects.filter(id=doctor_id).values_list('specialization', flat=True).first()
    if specialization is None:
        raise DoctorNotFound(doctor_id)
    return specialization


def get_doctor(doctor_id) -> Doctor:
    try:
        return Doctor.objects.get(id=doctor_id)
    except Doctor.DoesNotExist:
        raise DoctorNotFound(doctor_id) from None


def get_patient(patient_id) -> Patient:
    try:
        return Patient.objects.get(id=patient_id)
    except Patient.DoesNotExist:
        raise PatientNotFound(patient_id) from None


def list_doctors(*, q: Optional[str]=None, specialization: Optional[str]=None,
                 on_duty_only: bool=False, now=None) -> list[Doctor]:
    qs = Doctor.objects.all()
    if q:
        qs = qs.filter(Q(full_name__icontains=q) | Q(license_number__icontains=q))
    if specialization:
        qs = qs.filter(specialization=specialization)
    if on_duty_only:
        now = now or timezone.now()
        qs = qs.filter(shifts__start_at__lte=now, shifts__end_at__gt=now).distinct()
    return list(qs.order_by('id'))


def list_patients(*, q: Optional[str]=None) -> list[Patient]:
    qs = Patient.objects.all()
    if q:
        qs = qs.filter(
            Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(phone__icontains=q)
        )
    return list(qs.order_by('id'))


def create_doctor(*, full_name, license_number, specialization, department='') -> Doctor:
    now = timezone.now()
    doctor = Doctor.objects.create(
        full_name=full_name,
        license_number=license_number,
        specialization=specialization,
        department=department,
        created_at=now,
        updated_at=now,
    )
    logger.info("Doctor %s created (%s)", doctor.id, doctor.specialization)
    return doctor


def create_patient(*, first_name, last_name, date_of_birth=None, gender='', phone='', email='') -> Patient:
    now = timezone.now()
    patient = Patient.objects.create(
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date_of_birth,
        gender=gender,
        phone=phone,
        email=email,
        created_at=now,
        updated_at=now,
    )
    logger.info("Patient %s created", patient.id)
    return patient


def format_doctor(doctor: Doctor) -> dict:
    return {
        'id': doctor.id,
        'fullName': doctor.full_name,
        'licenseNumber': doctor.license_number,
        'specialization': doctor.specialization,
        'department': doctor.department,
        'createdAt': doctor.created_at.isoformat(),
    }


def format_patient(patient: Patient) -> dict:
    return {
        'id': patient.id,
        'firstName': patient.first_name,
        'lastName': patient.last_name,
        'name': patient.full_name,
        'dateOfBirth': patient.date_of_birth.isoformat() if patient.date_of_birth else None,
        'gender': patient.gender,
        'phone': patient.phone,
        'email': patient.email,
        'createdAt': patient.created_at.isoformat(),
    }
