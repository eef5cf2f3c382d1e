import bleach
from rest_framework import serializers

from clinic.models import Appointment, Invoice


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class ShiftWriteSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    startAt = serializers.DateTimeField()
    endAt = serializers.DateTimeField()
    room = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')

    def validate_room(self, v):
        return _clean(v)


class ShiftListQuerySerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1, required=False)


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    shiftId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    scheduledAt = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')

    def validate_notes(self, v):
        return _clean(v)


class AppointmentRescheduleSerializer(serializers.Serializer):
    shiftId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    scheduledAt = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate_notes(self, v):
        return _clean(v)


class AppointmentCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate_reason(self, v):
        return _clean(v)


class AppointmentListQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1, required=False)
    doctorId = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=[c[0] for c in Appointment.STATUS_CHOICES], required=False)


class InvoiceListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Invoice.PAYMENT_STATUS_CHOICES], required=False)
