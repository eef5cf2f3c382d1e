# clinic/management/commands/seed_clinic.py
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.contrib.auth.models import Group, User
from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import Doctor, Patient, Shift
from clinic.services import directory, shifts

DOCTORS = [
    ("Dr. Alice Heart", "LIC-0001", "Cardiology", "Internal Medicine"),
    ("Dr. Ben Nerve", "LIC-0002", "Neurology", "Neuroscience"),
    ("Dr. Carla Bones", "LIC-0003", "Orthopedics", "Surgery"),
    ("Dr. Dan Family", "LIC-0004", "Family Medicine", "Primary Care"),
]

PATIENTS = [
    ("John", "Smith", "MALE"),
    ("Maria", "Garcia", "FEMALE"),
    ("Sam", "Lee", "OTHER"),
]

STAFF = [
    ("reception1", "RECEPTION_GROUP"),
    ("billing1", "BILLING_GROUP"),
]


class Command(BaseCommand):
    help = "Seed demo doctors, patients, shifts and role accounts (idempotent, password=123456)."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=3, help="number of days of shifts to create")

    def handle(self, *args, **opts):
        for username, group_setting in STAFF:
            group, _ = Group.objects.get_or_create(name=getattr(settings, group_setting))
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"password": make_password("123456"), "is_active": True},
            )
            if not created:
                user.password = make_password("123456")
                user.is_active = True
                user.save(update_fields=["password", "is_active"])
            user.groups.add(group)
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({group.name})"))

        doctors = []
        for full_name, license_number, specialization, department in DOCTORS:
            doctor = Doctor.objects.filter(license_number=license_number).first()
            if doctor is None:
                doctor = directory.create_doctor(
                    full_name=full_name,
                    license_number=license_number,
                    specialization=specialization,
                    department=department,
                )
            doctors.append(doctor)

        for first_name, last_name, gender in PATIENTS:
            if not Patient.objects.filter(first_name=first_name, last_name=last_name).exists():
                directory.create_patient(first_name=first_name, last_name=last_name, gender=gender)

        today = timezone.now().replace(hour=0, minute=0, second=0, microsecond=0)
        created_shifts = 0
        for day in range(opts["days"]):
            base = today + timedelta(days=day)
            for i, doctor in enumerate(doctors):
                # morning and afternoon shifts back to back
                for start_hour in (8, 12):
                    start_at = base + timedelta(hours=start_hour)
                    end_at = start_at + timedelta(hours=4)
                    if Shift.objects.filter(doctor=doctor, start_at=start_at, end_at=end_at).exists():
                        continue
                    if shifts.find_conflicting_shift(doctor.id, start_at, end_at) is not None:
                        continue
                    shifts.create_shift(doctor.id, start_at, end_at, room=f"R{101 + i}")
                    created_shifts += 1

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(doctors)} doctors, {Patient.objects.count()} patients, {created_shifts} new shifts."
        ))
