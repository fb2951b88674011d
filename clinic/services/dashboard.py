"""Aggregates behind the dashboard screens."""
from __future__ import annotations

from datetime import timedelta

from django.db.models import Count
from django.db.models.functions import TruncMonth
from django.utils import timezone

from clinic.models import Appointment, Doctor, Medicine, Patient
from clinic.services import medicines


def _month_start(day):
    return day.replace(day=1)


def _months_back(day, months: int):
    year, month = day.year, day.month - months
    while month <= 0:
        month += 12
        year -= 1
    return day.replace(year=year, month=month, day=1)


def stats(today=None) -> dict:
    today = today or timezone.localdate()
    month_start = _month_start(today)
    next_month = _months_back(today, -1)
    appointments = Appointment.objects.all()
    return {
        'totalPatients': Patient.objects.count(),
        'totalDoctors': Doctor.objects.count(),
        'totalAppointments': appointments.count(),
        'totalMedicines': Medicine.objects.count(),
        'todayAppointments': appointments.filter(date=today).count(),
        'monthlyAppointments': appointments.filter(date__gte=month_start, date__lt=next_month).count(),
        'pendingAppointments': appointments.filter(status=Appointment.STATUS_SCHEDULED).count(),
        'completedAppointments': appointments.filter(status=Appointment.STATUS_COMPLETED).count(),
        'lowStockMedicines': medicines.low_stock().count(),
        'expiredMedicines': medicines.expired(today).count(),
    }


def appointments_by_status() -> list[dict]:
    rows = Appointment.objects.values('status').annotate(count=Count('id')).order_by('status')
    return [{'status': r['status'], 'count': r['count']} for r in rows]


def monthly_trends(today=None, months: int = 6) -> list[dict]:
    """Appointment counts per calendar month, oldest first."""
    today = today or timezone.localdate()
    since = _months_back(today, months)
    rows = (
        Appointment.objects.filter(date__gte=since)
        .annotate(month=TruncMonth('date'))
        .values('month')
        .annotate(count=Count('id'))
        .order_by('month')
    )
    return [{'month': r['month'].strftime('%Y-%m'), 'count': r['count']} for r in rows]


def upcoming_window(today=None, days: int = 7):
    today = today or timezone.localdate()
    return today, today + timedelta(days=days)
