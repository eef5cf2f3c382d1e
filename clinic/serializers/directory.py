import bleach
from rest_framework import serializers

from clinic.models import Doctor, Patient


class DoctorCreateSerializer(serializers.Serializer):
    fullName = serializers.CharField(min_length=2, max_length=100)
    licenseNumber = serializers.CharField(min_length=5, max_length=50)
    specialization = serializers.CharField(min_length=2, max_length=100)
    department = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')

    def validate_fullName(self, v):
        return bleach.clean(v.strip(), strip=True)

    def validate_licenseNumber(self, v):
        v = v.strip()
        if Doctor.objects.filter(license_number=v).exists():
            raise serializers.ValidationError('license number already registered')
        return v


class DoctorListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False)
    specialization = serializers.CharField(max_length=100, required=False)
    onDutyOnly = serializers.BooleanField(required=False, default=False)


class PatientCreateSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=50)
    lastName = serializers.CharField(max_length=50)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=[c[0] for c in Patient.GENDER_CHOICES], required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')

    def validate_firstName(self, v):
        return bleach.clean(v.strip(), strip=True)

    def validate_lastName(self, v):
        return bleach.clean(v.strip(), strip=True)


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False)
