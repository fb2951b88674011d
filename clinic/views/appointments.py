"""
Appointment views.

Booking, rescheduling and cancelling go through
``clinic.services.appointments``; these handlers validate input, enforce
who may touch which appointment and shape the responses.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor
from clinic.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
    AvailableSlotsQuerySerializer,
)
from clinic.serializers.output import appointment_dict
from clinic.services import appointments as booking
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)


def _get_appointment(request, appointment_id, verb: str):
    appointment = booking.appointment_queryset().filter(pk=appointment_id).first()
    if appointment is None:
        raise NotFound('Appointment not found')
    booking.ensure_can_access(request.user, appointment, verb)
    return appointment


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    if request.method == 'POST':
        s = AppointmentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        appointment, patient_created = booking.book_appointment(s.validated_data, request.user)
        log_action(user=request.user, action='create_appointment', object_type='appointment',
                   object_id=appointment.id, detail={'patientCreated': patient_created})
        logger.info("Appointment %s booked with doctor %s on %s %s",
                    appointment.id, appointment.doctor_id, appointment.date, appointment.time or '-')
        appointment = booking.appointment_queryset().get(pk=appointment.pk)
        return Response({
            'message': 'Appointment created successfully',
            'appointment': appointment_dict(appointment),
            'patientCreated': patient_created,
        }, status=201)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data

    qs = booking.scope_for_user(booking.appointment_queryset(), request.user)
    if vd['patientSearch']:
        qs = booking.search_patients(qs, vd['patientSearch'])
    if vd['createdDate']:
        # __date converts to the active (local) time zone
        qs = qs.filter(created_at__date=vd['createdDate'])
    if vd.get('status'):
        qs = qs.filter(status=vd['status'])
    items, pagination = paginate(qs.order_by('date', 'time', 'id'), page=vd['page'], limit=vd['limit'])
    return Response({'appointments': [appointment_dict(a) for a in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id: int):
    if request.method == 'GET':
        appointment = _get_appointment(request, appointment_id, 'view')
        return Response({'appointment': appointment_dict(appointment)})

    if request.method == 'PUT':
        appointment = _get_appointment(request, appointment_id, 'update')
        s = AppointmentUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        appointment = booking.update_appointment(appointment, s.validated_data)
        return Response({'message': 'Appointment updated successfully',
                         'appointment': appointment_dict(appointment)})

    appointment = _get_appointment(request, appointment_id, 'cancel')
    booking.cancel_appointment(appointment)
    log_action(user=request.user, action='cancel_appointment', object_type='appointment',
               object_id=appointment.id)
    return Response({'message': 'Appointment cancelled successfully',
                     'appointment': appointment_dict(appointment)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_slots(request, doctor_id: int):
    """Free start times for one doctor on one day."""
    q = AvailableSlotsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    doctor = Doctor.objects.filter(pk=doctor_id).first()
    if doctor is None:
        raise NotFound('Doctor not found')

    schedule, slots = booking.available_slots(doctor, q.validated_data['date'])
    if schedule is None:
        return Response({'availableSlots': [], 'message': 'Doctor is not available on this day'})
    return Response({
        'availableSlots': slots,
        'schedule': {'startTime': schedule.start_time, 'endTime': schedule.end_time},
    })
