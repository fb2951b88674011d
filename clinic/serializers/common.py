"""Shared serializer fields and query parameter schemas."""
import bleach
from rest_framework import serializers

from clinic.scheduling import is_valid_time, minutes_to_time, time_to_minutes


def clean_text(v):
    """Strip markup from free text typed into forms."""
    return bleach.clean((v or '').strip(), tags=[], strip=True)


class CleanCharField(serializers.CharField):
    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))


class TimeOfDayField(serializers.CharField):
    """``HH:MM`` 24-hour time, normalised to two digit hours."""
    default_error_messages = {'invalid_time': 'Time must be in HH:MM 24-hour format'}

    def __init__(self, **kwargs):
        kwargs.setdefault('max_length', 5)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not is_valid_time(value):
            self.fail('invalid_time')
        return minutes_to_time(time_to_minutes(value))


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=10)
    search = serializers.CharField(required=False, allow_blank=True, default='')
