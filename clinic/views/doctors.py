from __future__ import annotations

import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor, User
from clinic.serializers.doctor import (
    DoctorCreateSerializer,
    DoctorListQuerySerializer,
    DoctorUpdateSerializer,
    ScheduleReplaceSerializer,
)
from clinic.serializers.output import doctor_dict, schedule_dict
from clinic.services import doctors as doctor_service
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)


def _get_doctor(doctor_id) -> Doctor:
    doctor = doctor_service.doctor_queryset().filter(pk=doctor_id).first()
    if doctor is None:
        raise NotFound('Doctor not found')
    return doctor


def _ensure_admin_or_owner(user: User, doctor: Doctor) -> None:
    if user.role == User.ROLE_ADMIN:
        return
    if user.role == User.ROLE_DOCTOR and doctor.user_id == user.id:
        return
    raise PermissionDenied('You can only manage your own profile')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def doctors(request):
    if request.method == 'POST':
        if request.user.role != User.ROLE_ADMIN:
            raise PermissionDenied('Insufficient permissions')
        s = DoctorCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        doctor, initial_password = doctor_service.create_doctor(s.validated_data)
        log_action(user=request.user, action='create_doctor', object_type='doctor', object_id=doctor.id)
        body = {'message': 'Doctor created successfully', 'doctor': doctor_dict(_get_doctor(doctor.id))}
        if initial_password:
            body['initialPassword'] = initial_password
        return Response(body, status=201)

    q = DoctorListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = doctor_service.list_doctors(search=vd['search'], specialization=vd['specialization'])
    items, pagination = paginate(qs, page=vd['page'], limit=vd['limit'])
    return Response({'doctors': [doctor_dict(d) for d in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def doctor_detail(request, doctor_id: int):
    doctor = _get_doctor(doctor_id)

    if request.method == 'GET':
        return Response({'doctor': doctor_dict(doctor)})

    if request.method == 'PUT':
        _ensure_admin_or_owner(request.user, doctor)
        s = DoctorUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        doctor_service.update_doctor(doctor, s.validated_data)
        return Response({'message': 'Doctor updated successfully', 'doctor': doctor_dict(_get_doctor(doctor_id))})

    if request.user.role != User.ROLE_ADMIN:
        raise PermissionDenied('Insufficient permissions')
    doctor_service.delete_doctor(doctor)
    log_action(user=request.user, action='delete_doctor', object_type='doctor', object_id=doctor_id)
    logger.info("Doctor %s deleted by %s", doctor_id, request.user.id)
    return Response({'message': 'Doctor deleted successfully'})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def doctor_schedules(request, doctor_id: int):
    """Weekly working hours; PUT replaces the whole week."""
    doctor = _get_doctor(doctor_id)
    if request.method == 'PUT':
        _ensure_admin_or_owner(request.user, doctor)
        s = ScheduleReplaceSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        items = doctor_service.replace_schedules(doctor, s.validated_data['schedules'])
        log_action(user=request.user, action='update_schedules', object_type='doctor', object_id=doctor.id,
                   detail={'days': [i.day_of_week for i in items]})
        return Response({'message': 'Schedules updated successfully',
                         'schedules': [schedule_dict(i) for i in items]})
    return Response({'schedules': [schedule_dict(i) for i in doctor.schedules.all()]})
