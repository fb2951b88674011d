"""
Appointment booking and the free-slot lookup.

Handlers call into this module after validating input; role scoping lives
here so list, detail, update and cancel all apply the same rules.
"""
from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from rest_framework.exceptions import PermissionDenied, ValidationError

from clinic.exceptions import Conflict
from clinic.models import Appointment, Doctor, DoctorSchedule, Patient, User
from clinic.scheduling import AvailabilityWindow, compute_available_slots
from clinic.services.patients import create_patient_user

logger = logging.getLogger(__name__)


def js_weekday(day: date) -> int:
    """Weekday number used by schedules: 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def appointment_queryset():
    return Appointment.objects.select_related('patient__user', 'doctor__user')


def scope_for_user(qs, user: User):
    """Limit ``qs`` to what ``user`` may see: doctors and patients only their own."""
    if user.role == User.ROLE_DOCTOR:
        return qs.filter(doctor__user=user)
    if user.role == User.ROLE_PATIENT:
        return qs.filter(patient__user=user)
    return qs


def ensure_can_access(user: User, appointment: Appointment, verb: str = 'view') -> None:
    if user.role == User.ROLE_DOCTOR and appointment.doctor.user_id != user.id:
        raise PermissionDenied(f'You can only {verb} your own appointments')
    if user.role == User.ROLE_PATIENT and appointment.patient.user_id != user.id:
        raise PermissionDenied(f'You can only {verb} your own appointments')


def search_patients(qs, term: str):
    return qs.filter(
        Q(first_name__icontains=term)
        | Q(last_name__icontains=term)
        | Q(patient__user__first_name__icontains=term)
        | Q(patient__user__last_name__icontains=term)
    )


def find_conflict(doctor: Doctor, day: date, time: str | None, *, exclude_id=None):
    """An active booking for the same doctor, day and start time, if any."""
    if not time:
        return None
    qs = Appointment.objects.filter(
        doctor=doctor, date=day, time=time, status__in=Appointment.ACTIVE_STATUSES
    )
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.first()


@transaction.atomic
def book_appointment(data: dict, booked_by: User) -> tuple[Appointment, bool]:
    """Create an appointment from validated data.

    A walk-in (first/last name without ``patientId``) gets a placeholder
    patient record created in the same transaction.  Returns the
    appointment and whether a patient was created.
    """
    patient_created = False
    if booked_by.role == User.ROLE_PATIENT:
        patient = Patient.objects.filter(user=booked_by).first()
        if patient is None:
            raise ValidationError('Complete your patient profile before booking')
    elif data.get('patientId'):
        patient = Patient.objects.filter(pk=data['patientId']).first()
        if patient is None:
            raise ValidationError('Patient not found')
    else:
        user = create_patient_user(first_name=data['firstName'], last_name=data['lastName'])
        patient = Patient.objects.create(user=user)
        patient_created = True
        logger.info("Created walk-in patient %s for booking", patient.id)

    doctor = Doctor.objects.filter(pk=data['doctorId']).first()
    if doctor is None or not doctor.is_available:
        raise ValidationError('Doctor not found or not available')

    if find_conflict(doctor, data['date'], data.get('time')):
        raise Conflict('Doctor already has an appointment at this time')

    appointment = Appointment.objects.create(
        patient=patient,
        doctor=doctor,
        booked_by=booked_by,
        first_name=data.get('firstName') or '',
        last_name=data.get('lastName') or '',
        date=data['date'],
        time=data.get('time'),
        duration=data.get('duration', 30),
        type=data.get('type', 'CONSULTATION'),
        notes=data.get('notes') or '',
        symptoms=data.get('symptoms') or '',
    )
    return appointment, patient_created


@transaction.atomic
def update_appointment(appointment: Appointment, data: dict) -> Appointment:
    day = data.get('date', appointment.date)
    time = data.get('time', appointment.time)
    status = data.get('status', appointment.status)
    moved = day != appointment.date or time != appointment.time
    reactivated = appointment.status not in Appointment.ACTIVE_STATUSES
    if status in Appointment.ACTIVE_STATUSES and (moved or reactivated):
        if find_conflict(appointment.doctor, day, time, exclude_id=appointment.pk):
            raise Conflict('Doctor already has an appointment at this time')
    for key, value in data.items():
        setattr(appointment, key, value)
    appointment.save()
    return appointment


def cancel_appointment(appointment: Appointment) -> Appointment:
    appointment.status = Appointment.STATUS_CANCELLED
    appointment.save(update_fields=['status', 'updated_at'])
    return appointment


def available_slots(doctor: Doctor, day: date) -> tuple[DoctorSchedule | None, list[str]]:
    """Free start times for ``doctor`` on ``day``.

    Returns ``(None, [])`` when the doctor has no active schedule that
    weekday.  Bookings are passed to the calculator as raw
    ``(time, duration)`` pairs; untimed ones are skipped there.
    """
    schedule = DoctorSchedule.objects.filter(
        doctor=doctor, day_of_week=js_weekday(day), is_active=True
    ).first()
    if schedule is None:
        return None, []
    booked = Appointment.objects.filter(
        doctor=doctor, date=day, status__in=Appointment.ACTIVE_STATUSES
    ).values_list('time', 'duration')
    window = AvailabilityWindow.from_times(schedule.start_time, schedule.end_time)
    slots = compute_available_slots(window, list(booked), settings.APPOINTMENT_SLOT_MINUTES)
    return schedule, slots
