"""
Django admin registrations for the clinic models.

Timestamps are stamped by the services rather than by ``auto_now``, so
the admin does the same in :meth:`StampedAdmin.save_model`.  Invoices
and transitions are read-only here; they are produced by the billing
engine and the appointment lifecycle.
"""

from django.contrib import admin
from django.utils import timezone

from .models import Doctor, Patient, Shift, Appointment, AppointmentTransition, Invoice


class StampedAdmin(admin.ModelAdmin):
    readonly_fields = ('created_at', 'updated_at')

    def save_model(self, request, obj, form, change):
        now = timezone.now()
        if not change:
            obj.created_at = now
        obj.updated_at = now
        super().save_model(request, obj, form, change)


@admin.register(Doctor)
class DoctorAdmin(StampedAdmin):
    list_display = ('id', 'full_name', 'license_number', 'specialization', 'department')
    list_filter = ('specialization',)
    search_fields = ('full_name', 'license_number')


@admin.register(Patient)
class PatientAdmin(StampedAdmin):
    list_display = ('id', 'first_name', 'last_name', 'date_of_birth', 'phone')
    search_fields = ('first_name', 'last_name', 'phone', 'email')


@admin.register(Shift)
class ShiftAdmin(StampedAdmin):
    list_display = ('id', 'doctor', 'start_at', 'end_at', 'room')
    list_filter = ('doctor',)


class AppointmentTransitionInline(admin.TabularInline):
    model = AppointmentTransition
    extra = 0
    can_delete = False
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')


@admin.register(Appointment)
class AppointmentAdmin(StampedAdmin):
    list_display = ('id', 'reference', 'patient', 'doctor', 'scheduled_at', 'status', 'completed_at')
    list_filter = ('status', 'doctor')
    search_fields = ('reference', 'patient__first_name', 'patient__last_name')
    # status changes go through the lifecycle endpoints so history and billing stay consistent
    readonly_fields = ('reference', 'status', 'completed_at', 'created_at', 'updated_at')
    inlines = [AppointmentTransitionInline]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('id', 'appointment', 'base_amount', 'specialization_premium', 'total_amount',
                    'currency', 'payment_status')
    list_filter = ('payment_status', 'currency')
    readonly_fields = ('appointment', 'base_amount', 'specialization_premium', 'total_amount',
                       'currency', 'created_at', 'updated_at')

    def has_add_permission(self, request):
        return False

    def save_model(self, request, obj, form, change):
        obj.updated_at = timezone.now()
        super().save_model(request, obj, form, change)
