"""
Domain events.

``appointment_completed`` is sent by the appointment service right after
an appointment enters ``COMPLETED``, inside the same database
transaction.  Receivers get ``appointment`` as a keyword argument and
any exception they raise rolls the completion back.
"""
from django.dispatch import Signal

appointment_completed = Signal()
