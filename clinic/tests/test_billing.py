from decimal import Decimal

import pytest
from django.utils import timezone

from clinic.exceptions import (
    AppointmentNotCompleted,
    AppointmentNotFound,
    InvoiceAlreadyExists,
    InvoiceNotFound,
)
from clinic.models import Appointment, Invoice, Patient
from clinic.services import appointments, billing, pricing
from clinic.tests.utils import at

pytestmark = pytest.mark.django_db


def _completed_without_invoice(doctor, patient):
    """A COMPLETED appointment whose automatic invoice has been removed."""
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    Invoice.objects.filter(appointment=appt).delete()
    return appt


def test_second_generate_fails(doctor, patient):
    appt = _completed_without_invoice(doctor, patient)
    first = billing.generate_invoice_for_appointment(appt.id)
    with pytest.raises(InvoiceAlreadyExists) as exc:
        billing.generate_invoice_for_appointment(appt.id)
    assert exc.value.detail['invoiceId'] == first.id
    assert Invoice.objects.filter(appointment=appt).count() == 1


def test_completion_already_billed(doctor, patient):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    with pytest.raises(InvoiceAlreadyExists):
        billing.generate_invoice_for_appointment(appt.id)


def test_cancelled_appointment_is_not_billable(doctor, patient):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.cancel_appointment(appt.id)
    with pytest.raises(AppointmentNotCompleted):
        billing.generate_invoice_for_appointment(appt.id)
    assert not Invoice.objects.exists()


def test_scheduled_appointment_is_not_billable(doctor, patient):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    with pytest.raises(AppointmentNotCompleted):
        billing.generate_invoice_for_appointment(appt.id)


def test_unknown_appointment(db):
    with pytest.raises(AppointmentNotFound):
        billing.generate_invoice_for_appointment(404)
    with pytest.raises(AppointmentNotFound):
        billing.get_invoice_for_appointment(404)


def test_cardiology_amounts(doctor, patient):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    invoice = billing.get_invoice_for_appointment(appt.id)
    assert invoice.base_amount == Decimal('100.00')
    assert invoice.specialization_premium == Decimal('50.00')
    assert invoice.total_amount == Decimal('150.00')
    assert invoice.currency == 'USD'
    assert invoice.payment_status == Invoice.PAYMENT_PENDING


def test_unknown_specialization_has_no_premium(make_doctor, patient):
    doctor = make_doctor('LIC-9', specialization='Astrology')
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    invoice = billing.get_invoice_for_appointment(appt.id)
    assert invoice.specialization_premium == Decimal('0.00')
    assert invoice.total_amount == invoice.base_amount


def test_premium_rounds_half_up(settings):
    settings.BILLING_SPECIALIZATION_RATES = {'Odd': '0.125'}
    assert pricing.premium_for('Odd', Decimal('10.00')) == Decimal('1.25')
    assert pricing.premium_for('Odd', Decimal('0.20')) == Decimal('0.03')


def test_base_fee_from_settings(settings):
    settings.BILLING_BASE_CONSULTATION_FEE = '80'
    amounts = billing.calculate_amounts('Cardiology')
    assert amounts == {
        'base_amount': Decimal('80.00'),
        'specialization_premium': Decimal('40.00'),
        'total_amount': Decimal('120.00'),
    }


def test_racing_insert_reports_existing_invoice(doctor, patient, monkeypatch):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    existing = Invoice.objects.get(appointment=appt)

    real = billing._existing_invoice_id
    calls = []

    def stale_first(appointment_id):
        # the pre-check misses the row a concurrent writer just inserted
        calls.append(appointment_id)
        return None if len(calls) == 1 else real(appointment_id)

    monkeypatch.setattr(billing, '_existing_invoice_id', stale_first)
    with pytest.raises(InvoiceAlreadyExists) as exc:
        billing.generate_invoice_for_appointment(appt.id)
    assert exc.value.detail['invoiceId'] == existing.id
    assert Invoice.objects.filter(appointment=appt).count() == 1


def test_lookups(make_doctor, patient):
    now = timezone.now()
    other = Patient.objects.create(first_name='Ann', last_name='Lee', created_at=now, updated_at=now)
    doctor = make_doctor()
    a1 = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(9))
    a2 = appointments.create_appointment(other.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(a1.id)
    appointments.complete_appointment(a2.id)
    Invoice.objects.filter(appointment=a2).update(payment_status=Invoice.PAYMENT_PAID)

    assert [i.appointment_id for i in billing.list_invoices_for_patient(patient.id)] == [a1.id]
    assert [i.appointment_id for i in billing.list_invoices_by_status('PAID')] == [a2.id]
    assert [i.appointment_id for i in billing.list_invoices_by_status('PENDING')] == [a1.id]
    assert len(billing.list_invoices()) == 2
    assert billing.list_invoices_for_patient(999) == []

    inv = billing.get_invoice_for_appointment(a1.id)
    assert billing.get_invoice(inv.id).id == inv.id
    with pytest.raises(InvoiceNotFound):
        billing.get_invoice(99999)


def test_invoice_not_found_for_unbilled_appointment(doctor, patient):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    assert appt.status == Appointment.STATUS_SCHEDULED
    with pytest.raises(InvoiceNotFound):
        billing.get_invoice_for_appointment(appt.id)


def test_format_invoice_uses_decimal_strings(doctor, patient):
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    data = billing.format_invoice(billing.get_invoice_for_appointment(appt.id))
    assert data['totalAmount'] == '150.00'
    assert data['baseAmount'] == '100.00'
    assert data['specializationPremium'] == '50.00'
    assert data['patientId'] == patient.id


def test_fractional_base_fee_bills_exact_cents(settings, doctor, patient):
    settings.BILLING_BASE_CONSULTATION_FEE = '10.04'
    appt = appointments.create_appointment(patient.id, doctor.id, scheduled_at=at(10))
    appointments.complete_appointment(appt.id)
    invoice = billing.get_invoice_for_appointment(appt.id)
    assert invoice.base_amount == Decimal('10.04')
    assert invoice.specialization_premium == Decimal('5.02')
    assert invoice.total_amount == Decimal('15.06')
    appt.refresh_from_db()
    assert appt.status == Appointment.STATUS_COMPLETED
