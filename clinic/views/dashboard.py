"""
Dashboard endpoints.

Overview numbers for the landing screen.  Appointment lists are scoped the
same way as ``/api/appointments``: doctors and patients only see their own.
Inventory alerts are limited to ADMIN and STAFF, as under ``/api/medicines``.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Appointment, Patient
from clinic.permissions import IsClinicalStaff
from clinic.serializers.output import appointment_dict, medicine_dict, patient_dict
from clinic.services import dashboard, medicines
from clinic.services.appointments import appointment_queryset, scope_for_user
from clinic.views.medicines import IsPharmacyStaff

ALERT_LIMIT = 10


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stats(request):
    today = timezone.localdate()
    recent = scope_for_user(appointment_queryset(), request.user).order_by('-created_at', '-id')[:5]
    return Response({
        'stats': dashboard.stats(today),
        'recentAppointments': [appointment_dict(a) for a in recent],
        'appointmentsByStatus': dashboard.appointments_by_status(),
        'monthlyTrends': dashboard.monthly_trends(today),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def today_appointments(request):
    qs = scope_for_user(appointment_queryset(), request.user)
    qs = qs.filter(date=timezone.localdate()).order_by('time', 'id')
    return Response({'appointments': [appointment_dict(a) for a in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def upcoming_appointments(request):
    start, end = dashboard.upcoming_window()
    qs = scope_for_user(appointment_queryset(), request.user).filter(
        date__gte=start,
        date__lte=end,
        status__in=[Appointment.STATUS_SCHEDULED, Appointment.STATUS_CONFIRMED],
    )
    return Response({'appointments': [appointment_dict(a) for a in qs.order_by('date', 'time', 'id')]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def recent_patients(request):
    qs = Patient.objects.select_related('user').order_by('-created_at', '-id')[:10]
    return Response({'patients': [patient_dict(p) for p in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyStaff])
def medicine_alerts(request):
    low = medicines.low_stock()
    expired = medicines.expired()
    expiring = medicines.expiring_soon()
    return Response({
        'lowStockMedicines': [medicine_dict(m) for m in low[:ALERT_LIMIT]],
        'expiredMedicines': [medicine_dict(m) for m in expired[:ALERT_LIMIT]],
        'expiringSoonMedicines': [medicine_dict(m) for m in expiring[:ALERT_LIMIT]],
        'alerts': {
            'lowStock': low.count(),
            'expired': expired.count(),
            'expiringSoon': expiring.count(),
        },
    })
