import logging
import secrets
from typing import Optional

from django.db import transaction
from django.db.models import Count, Q
from rest_framework.exceptions import ValidationError

from clinic.models import Doctor, DoctorSchedule, User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {
    'specialization': 'specialization',
    'qualification': 'qualification',
    'experience': 'experience',
    'consultationFee': 'consultation_fee',
    'department': 'department',
    'designation': 'designation',
    'biography': 'biography',
    'languages': 'languages',
    'address': 'address',
    'isAvailable': 'is_available',
}


def doctor_queryset():
    return (
        Doctor.objects.select_related('user')
        .prefetch_related('schedules')
        .annotate(appointment_count=Count('appointments', distinct=True))
    )


def list_doctors(*, search: str = '', specialization: str = ''):
    qs = doctor_queryset()
    if search:
        qs = qs.filter(
            Q(user__first_name__icontains=search)
            | Q(user__last_name__icontains=search)
            | Q(specialization__icontains=search)
        )
    if specialization:
        qs = qs.filter(specialization__icontains=specialization)
    return qs.order_by('-created_at', '-id')


@transaction.atomic
def create_doctor(data: dict) -> tuple[Doctor, Optional[str]]:
    """Create the DOCTOR user, profile and optional weekly schedule.

    Returns the doctor and the generated initial password when the caller
    did not supply one.
    """
    password = data.get('password') or None
    initial_password = None
    if not password:
        password = initial_password = secrets.token_urlsafe(12)
    user = User.objects.create_user(
        username=data['email'].split('@')[0] + '-' + secrets.token_hex(3),
        email=data['email'],
        password=password,
        first_name=data['firstName'],
        last_name=data['lastName'],
        phone=data.get('phone') or '',
        role=User.ROLE_DOCTOR,
    )
    doctor = Doctor(user=user, license_number=data['licenseNumber'])
    for key, column in PROFILE_FIELDS.items():
        if key in data:
            setattr(doctor, column, data[key])
    doctor.save()
    for day in sorted(set(data.get('workingDays') or [])):
        DoctorSchedule.objects.create(
            doctor=doctor, day_of_week=day, start_time=data['startTime'], end_time=data['endTime']
        )
    logger.info("Created doctor %s (%s)", doctor.id, doctor.specialization)
    return doctor, initial_password


@transaction.atomic
def update_doctor(doctor: Doctor, data: dict) -> Doctor:
    user = doctor.user
    user_fields = []
    for key, column in (('firstName', 'first_name'), ('lastName', 'last_name'), ('phone', 'phone')):
        if data.get(key):
            setattr(user, column, data[key])
            user_fields.append(column)
    if data.get('newPassword'):
        if not user.check_password(data['currentPassword']):
            raise ValidationError({'currentPassword': ['Current password is incorrect']})
        user.set_password(data['newPassword'])
        user_fields.append('password')
    if user_fields:
        user.save(update_fields=user_fields + ['updated_at'])
    for key, column in PROFILE_FIELDS.items():
        if key in data:
            setattr(doctor, column, data[key])
    doctor.save()
    return doctor


@transaction.atomic
def replace_schedules(doctor: Doctor, items: list[dict]) -> list[DoctorSchedule]:
    """Swap the doctor's whole weekly schedule for ``items``."""
    DoctorSchedule.objects.filter(doctor=doctor).delete()
    created = [
        DoctorSchedule.objects.create(
            doctor=doctor,
            day_of_week=item['dayOfWeek'],
            start_time=item['startTime'],
            end_time=item['endTime'],
            is_active=item.get('isActive', True),
        )
        for item in items
    ]
    return sorted(created, key=lambda s: s.day_of_week)


@transaction.atomic
def delete_doctor(doctor: Doctor) -> None:
    user = doctor.user
    doctor.delete()
    user.delete()
