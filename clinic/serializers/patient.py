from rest_framework import serializers

from clinic.models import Doctor, Patient, User
from .common import CleanCharField, TimeOfDayField

BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']


class PatientBaseSerializer(serializers.Serializer):
    """Fields shared by create and update; every field is optional here."""
    firstName = CleanCharField(required=False, allow_blank=True, max_length=150)
    lastName = CleanCharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=[c[0] for c in Patient.GENDER_CHOICES], required=False)
    address = CleanCharField(required=False, allow_blank=True, max_length=255)
    emergencyContactName = CleanCharField(required=False, allow_blank=True, max_length=128)
    emergencyContactPhone = CleanCharField(required=False, allow_blank=True, max_length=32)
    medicalHistory = CleanCharField(required=False, allow_blank=True)
    allergies = CleanCharField(required=False, allow_blank=True)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS, required=False, allow_blank=True)
    admitDate = serializers.DateField(required=False, allow_null=True)
    admitTime = TimeOfDayField(required=False, allow_blank=True)
    wardNumber = CleanCharField(required=False, allow_blank=True, max_length=32)
    problem = CleanCharField(required=False, allow_blank=True)
    diagnosis = CleanCharField(required=False, allow_blank=True)
    treatmentPlan = CleanCharField(required=False, allow_blank=True)
    notes = CleanCharField(required=False, allow_blank=True)
    doctorId = serializers.PrimaryKeyRelatedField(
        queryset=Doctor.objects.all(), required=False, allow_null=True, source='doctor'
    )

    def to_internal_value(self, data):
        # Forms send gender in any case ("male", "Female")
        if hasattr(data, 'get') and isinstance(data.get('gender'), str):
            data = data.copy()
            data['gender'] = data['gender'].upper()
        return super().to_internal_value(data)

    def validate_email(self, v):
        v = (v or '').strip().lower()
        if not v:
            return v
        qs = User.objects.filter(email__iexact=v)
        instance = self.context.get('instance')
        if instance is not None:
            qs = qs.exclude(pk=instance.user_id)
        if qs.exists():
            raise serializers.ValidationError('A user with this email already exists')
        return v


class PatientCreateSerializer(PatientBaseSerializer):
    firstName = CleanCharField(max_length=150)
    lastName = CleanCharField(max_length=150)


class PatientUpdateSerializer(PatientBaseSerializer):
    pass
