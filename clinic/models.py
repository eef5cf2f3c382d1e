"""
Database models for the hospital scheduling and billing backend.

Doctors and patients are plain directory records.  Shifts, appointments
and invoices carry the scheduling and billing invariants; the ones that
can be expressed in SQL are declared as constraints here so that the
database rejects violating rows even if a service is bypassed.

Timestamps are stamped explicitly by the service layer at the moment of
the operation, so none of the fields below use ``auto_now``.
"""
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q


class Doctor(models.Model):
    """A doctor who can hold shifts and treat patients.

    ``specialization`` drives the premium added to every invoice the
    doctor's completed appointments produce.
    """
    full_name = models.CharField(max_length=100)
    license_number = models.CharField(max_length=50, unique=True)
    specialization = models.CharField(max_length=100, db_index=True)
    department = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.specialization})"


class Patient(models.Model):
    GENDER_CHOICES = [
        ('MALE', 'Male'),
        ('FEMALE', 'Female'),
        ('OTHER', 'Other'),
    ]
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name


class Shift(models.Model):
    """A doctor's bounded on-duty window, optionally in a named room.

    Intervals are half-open ``[start_at, end_at)``.  The no-overlap rule
    per doctor is enforced by :mod:`clinic.services.shifts` under a lock
    on the doctor row; ``end_at > start_at`` is also a table constraint.
    """
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='shifts')
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    room = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'start_at', 'end_at'], name='clinic_shift_doctor_window'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=F('start_at')),
                name='shift_end_after_start',
            ),
        ]

    def __str__(self):
        return f"Shift(d={self.doctor_id}, {self.start_at:%F %T}~{self.end_at:%F %T})"


class Appointment(models.Model):
    """A booking of a patient with a doctor, optionally inside a shift.

    Lifecycle: ``SCHEDULED`` -> ``COMPLETED`` | ``CANCELLED``.  Both
    targets are terminal.  Transitions go through
    :mod:`clinic.services.appointments` only.
    """
    STATUS_SCHEDULED = 'SCHEDULED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)

    reference = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='appointments')
    # Deleting a shift keeps the booking; doctor and scheduled_at stay on the row
    shift = models.ForeignKey(
        Shift, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    scheduled_at = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'scheduled_at'], name='clinic_appt_doctor_time'),
            models.Index(fields=['patient', 'scheduled_at'], name='clinic_appt_patient_time'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status='COMPLETED', completed_at__isnull=False)
                    | (~Q(status='COMPLETED') & Q(completed_at__isnull=True))
                ),
                name='appointment_completed_at_iff_completed',
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def __str__(self) -> str:
        return f"Appointment {self.id} p={self.patient_id} d={self.doctor_id} [{self.status}]"


class AppointmentTransition(models.Model):
    """Records a status transition for an appointment."""
    appointment = models.ForeignKey(Appointment, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=20)
    to_status = models.CharField(max_length=20)
    operator = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL,
        related_name='appointment_transitions',
    )
    timestamp = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)

    class Meta:
        indexes = [models.Index(fields=['appointment', 'timestamp'], name='clinic_transition_appt_ts')]

    def __str__(self) -> str:
        return f"{self.appointment_id}: {self.from_status} → {self.to_status}"


class Invoice(models.Model):
    """The billable record of one completed appointment.

    The one-to-one column is the storage-level guarantee that at most one
    invoice exists per appointment.  ``total_amount`` is computed in
    :class:`~decimal.Decimal` by the billing service; it is not a table
    constraint because SQLite compares decimal columns as floats.
    """
    PAYMENT_PENDING = 'PENDING'
    PAYMENT_PAID = 'PAID'
    PAYMENT_PARTIALLY_PAID = 'PARTIALLY_PAID'
    PAYMENT_CANCELLED = 'CANCELLED'
    PAYMENT_REFUNDED = 'REFUNDED'
    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, 'Pending'),
        (PAYMENT_PAID, 'Paid'),
        (PAYMENT_PARTIALLY_PAID, 'Partially paid'),
        (PAYMENT_CANCELLED, 'Cancelled'),
        (PAYMENT_REFUNDED, 'Refunded'),
    ]

    appointment = models.OneToOneField(Appointment, on_delete=models.PROTECT, related_name='invoice')
    base_amount = models.DecimalField(max_digits=10, decimal_places=2)
    specialization_premium = models.DecimalField(max_digits=10, decimal_places=2)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING, db_index=True
    )
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    def __str__(self) -> str:
        return f"Invoice {self.id} for appointment {self.appointment_id}: {self.total_amount} {self.currency}"
