from rest_framework import serializers

from clinic.models import Appointment
from .common import CleanCharField, TimeOfDayField

TYPES = [c[0] for c in Appointment.TYPE_CHOICES]
STATUSES = [c[0] for c in Appointment.STATUS_CHOICES]


class AppointmentListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=10)
    patientSearch = serializers.CharField(required=False, allow_blank=True, default='')
    createdDate = serializers.DateField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(choices=STATUSES, required=False)


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False, min_value=1)
    firstName = CleanCharField(required=False, allow_blank=True, max_length=150)
    lastName = CleanCharField(required=False, allow_blank=True, max_length=150)
    doctorId = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    time = TimeOfDayField(required=False)
    duration = serializers.IntegerField(required=False, min_value=15, max_value=180, default=30)
    type = serializers.ChoiceField(choices=TYPES, required=False, default='CONSULTATION')
    notes = CleanCharField(required=False, allow_blank=True)
    symptoms = CleanCharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get('patientId') and not (attrs.get('firstName') and attrs.get('lastName')):
            raise serializers.ValidationError(
                'Either patientId or both firstName and lastName must be provided'
            )
        return attrs


class AppointmentUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    time = TimeOfDayField(required=False)
    duration = serializers.IntegerField(required=False, min_value=15, max_value=180)
    type = serializers.ChoiceField(choices=TYPES, required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    notes = CleanCharField(required=False, allow_blank=True)
    symptoms = CleanCharField(required=False, allow_blank=True)
    diagnosis = CleanCharField(required=False, allow_blank=True)
    prescription = CleanCharField(required=False, allow_blank=True)


class AvailableSlotsQuerySerializer(serializers.Serializer):
    date = serializers.DateField(error_messages={'required': 'Date is required'})
