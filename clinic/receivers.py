from django.dispatch import receiver

from clinic.services.billing import generate_invoice_for_appointment
from clinic.signals import appointment_completed


@receiver(appointment_completed, dispatch_uid='clinic.bill_completed_appointment')
def bill_completed_appointment(sender, appointment, **kwargs):
    generate_invoice_for_appointment(appointment.id)
