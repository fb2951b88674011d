from rest_framework import serializers

from clinic.models import Doctor, User
from clinic.scheduling import time_to_minutes
from .common import CleanCharField, PageQuerySerializer, TimeOfDayField


class DoctorListQuerySerializer(PageQuerySerializer):
    specialization = serializers.CharField(required=False, allow_blank=True, default='')


class DoctorProfileSerializer(serializers.Serializer):
    firstName = CleanCharField(required=False, max_length=150)
    lastName = CleanCharField(required=False, max_length=150)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    specialization = CleanCharField(required=False, max_length=128)
    qualification = CleanCharField(required=False, allow_blank=True, max_length=255)
    experience = serializers.IntegerField(required=False, min_value=0)
    consultationFee = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)
    department = CleanCharField(required=False, allow_blank=True, max_length=128)
    designation = CleanCharField(required=False, allow_blank=True, max_length=128)
    biography = CleanCharField(required=False, allow_blank=True)
    languages = serializers.ListField(child=CleanCharField(max_length=64), required=False)
    address = CleanCharField(required=False, allow_blank=True, max_length=255)
    isAvailable = serializers.BooleanField(required=False)


class DoctorCreateSerializer(DoctorProfileSerializer):
    firstName = CleanCharField(max_length=150)
    lastName = CleanCharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)
    licenseNumber = CleanCharField(max_length=64)
    specialization = CleanCharField(max_length=128)
    # Optional initial weekly schedule
    workingDays = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6), required=False
    )
    startTime = TimeOfDayField(required=False)
    endTime = TimeOfDayField(required=False)

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('A user with this email already exists')
        return v

    def validate_licenseNumber(self, v):
        if Doctor.objects.filter(license_number=v).exists():
            raise serializers.ValidationError('License number is already registered')
        return v

    def validate(self, attrs):
        if attrs.get('workingDays'):
            start, end = attrs.get('startTime'), attrs.get('endTime')
            if not start or not end:
                raise serializers.ValidationError('startTime and endTime are required with workingDays')
            if time_to_minutes(start) >= time_to_minutes(end):
                raise serializers.ValidationError('startTime must be before endTime')
        return attrs


class DoctorUpdateSerializer(DoctorProfileSerializer):
    currentPassword = serializers.CharField(required=False, trim_whitespace=False)
    newPassword = serializers.CharField(required=False, trim_whitespace=False)

    def validate(self, attrs):
        if bool(attrs.get('currentPassword')) != bool(attrs.get('newPassword')):
            raise serializers.ValidationError('currentPassword and newPassword must be sent together')
        return attrs


class ScheduleItemSerializer(serializers.Serializer):
    dayOfWeek = serializers.IntegerField(min_value=0, max_value=6)
    startTime = TimeOfDayField()
    endTime = TimeOfDayField()
    isActive = serializers.BooleanField(required=False, default=True)


class ScheduleReplaceSerializer(serializers.Serializer):
    schedules = ScheduleItemSerializer(many=True)

    def validate_schedules(self, items):
        days = [i['dayOfWeek'] for i in items]
        if len(days) != len(set(days)):
            raise serializers.ValidationError('Each weekday may appear only once')
        return items
