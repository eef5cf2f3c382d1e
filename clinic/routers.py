"""
URL mappings for the scheduling and billing API.

Trailing slashes are deliberately omitted, matching the rest of the
project (``APPEND_SLASH = False``).
"""
from django.urls import path, include
from rest_framework.authtoken.views import obtain_auth_token

from .views import health
from .views.appointments import (
    appointments_list,
    appointment_detail,
    appointment_complete,
    appointment_cancel,
    appointment_history,
    appointment_by_reference,
)
from .views.billing import appointment_invoice, patient_invoices, invoices_list, invoice_detail
from .views.directory import doctors_list, doctor_detail, patients_list, patient_detail
from .views.shifts import shifts_list, shift_detail


urlpatterns = [
    # django_prometheus.urls serves /metrics itself
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/token', obtain_auth_token, name='api-token'),
    # Directory
    path('api/doctors', doctors_list),
    path('api/doctors/<int:pk>', doctor_detail),
    path('api/patients', patients_list),
    path('api/patients/<int:pk>', patient_detail),
    # Shifts
    path('api/shifts', shifts_list),
    path('api/shifts/<int:pk>', shift_detail),
    # Appointments
    path('api/appointments', appointments_list),
    path('api/appointments/<int:pk>', appointment_detail),
    path('api/appointments/<int:pk>/complete', appointment_complete),
    path('api/appointments/<int:pk>/cancel', appointment_cancel),
    path('api/appointments/<int:pk>/history', appointment_history),
    path('api/appointments/by-reference/<uuid:reference>', appointment_by_reference),
    # Billing
    path('api/billing/appointments/<int:pk>/invoice', appointment_invoice),
    path('api/billing/patients/<int:pk>/invoices', patient_invoices),
    path('api/billing/invoices', invoices_list),
    path('api/billing/invoices/<int:pk>', invoice_detail),
]
