"""
Billing engine.

Turns a completed appointment into exactly one invoice.  The amount is
the base consultation fee plus the premium for the treating doctor's
specialization, computed with :class:`decimal.Decimal`.

Uniqueness does not rely on the ``exists()`` pre-check alone: the
appointment row is locked for the duration of the transaction and the
insert runs in a savepoint, so a unique-constraint violation from a
racing writer surfaces as :class:`InvoiceAlreadyExists` rather than as a
second invoice or an opaque integrity error.
"""
import logging
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic.exceptions import (
    AppointmentNotCompleted,
    AppointmentNotFound,
    InvoiceAlreadyExists,
    InvoiceNotFound,
)
from clinic.models import Appointment, Invoice
from clinic.services import directory, pricing
from clinic.services.events import broadcast_on_commit

logger = logging.getLogger(__name__)


def _existing_invoice_id(appointment_id) -> Optional[int]:
    return Invoice.objects.filter(appointment_id=appointment_id).values_list('id', flat=True).first()


def calculate_amounts(specialization: str) -> dict:
    base = pricing.base_consultation_fee()
    premium = pricing.premium_for(specialization, base)
    return {
        'base_amount': base,
        'specialization_premium': premium,
        'total_amount': base + premium,
    }


@transaction.atomic
def generate_invoice_for_appointment(appointment_id) -> Invoice:
    appointment = Appointment.objects.select_for_update().filter(id=appointment_id).first()
    if appointment is None:
        raise AppointmentNotFound(appointment_id)
    if appointment.status != Appointment.STATUS_COMPLETED:
        raise AppointmentNotCompleted(appointment.id, appointment.status)

    existing_id = _existing_invoice_id(appointment.id)
    if existing_id is not None:
        raise InvoiceAlreadyExists(appointment.id, existing_id)

    amounts = calculate_amounts(directory.specialization_of(appointment.doctor_id))
    now = timezone.now()
    try:
        with transaction.atomic():
            invoice = Invoice.objects.create(
                appointment=appointment,
                currency=settings.BILLING_CURRENCY,
                payment_status=Invoice.PAYMENT_PENDING,
                created_at=now,
                updated_at=now,
                **amounts,
            )
    except IntegrityError:
        existing_id = _existing_invoice_id(appointment.id)
        if existing_id is None:
            raise
        logger.warning("Concurrent invoice insert for appointment %s", appointment.id)
        raise InvoiceAlreadyExists(appointment.id, existing_id) from None

    logger.info(
        "Invoice %s generated for appointment %s: %s + %s = %s %s",
        invoice.id, appointment.id, invoice.base_amount, invoice.specialization_premium,
        invoice.total_amount, invoice.currency,
    )
    broadcast_on_commit('invoice.generated', {
        'invoiceId': invoice.id,
        'appointmentId': appointment.id,
        'totalAmount': str(invoice.total_amount),
    })
    return invoice


def get_invoice(invoice_id) -> Invoice:
    try:
        return Invoice.objects.select_related('appointment').get(id=invoice_id)
    except Invoice.DoesNotExist:
        raise InvoiceNotFound(invoice_id) from None


def get_invoice_for_appointment(appointment_id) -> Invoice:
    if not Appointment.objects.filter(id=appointment_id).exists():
        raise AppointmentNotFound(appointment_id)
    invoice = Invoice.objects.select_related('appointment').filter(appointment_id=appointment_id).first()
    if invoice is None:
        raise InvoiceNotFound(appointment_id)
    return invoice


def list_invoices() -> list[Invoice]:
    return list(Invoice.objects.select_related('appointment').order_by('id'))


def list_invoices_for_patient(patient_id) -> list[Invoice]:
    return list(
        Invoice.objects.select_related('appointment')
        .filter(appointment__patient_id=patient_id)
        .order_by('id')
    )


def list_invoices_by_status(payment_status: str) -> list[Invoice]:
    return list(
        Invoice.objects.select_related('appointment')
        .filter(payment_status=payment_status)
        .order_by('id')
    )


def format_invoice(invoice: Invoice) -> dict:
    # Money goes out as decimal strings so clients never see float rounding
    return {
        'id': invoice.id,
        'appointmentId': invoice.appointment_id,
        'appointmentReference': str(invoice.appointment.reference),
        'patientId': invoice.appointment.patient_id,
        'doctorId': invoice.appointment.doctor_id,
        'baseAmount': str(invoice.base_amount),
        'specializationPremium': str(invoice.specialization_premium),
        'totalAmount': str(invoice.total_amount),
        'currency': invoice.currency,
        'paymentStatus': invoice.payment_status,
        'createdAt': invoice.created_at.isoformat(),
        'updatedAt': invoice.updated_at.isoformat(),
    }
