"""
Patient management views.

Clinical staff list, register and edit patients; a logged in patient may
only read their own record.  Removing a patient is reserved for admins.
"""
from __future__ import annotations

import logging

from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Patient, User
from clinic.permissions import IsClinicalStaff, STAFF_ROLES
from clinic.serializers.common import PageQuerySerializer
from clinic.serializers.output import appointment_dict, patient_dict
from clinic.serializers.patient import PatientCreateSerializer, PatientUpdateSerializer
from clinic.services import patients as patient_service
from clinic.services.appointments import appointment_queryset
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)


def _check_patient_object_scope(user, patient_id) -> Patient:
    obj = Patient.objects.select_related('user').filter(id=patient_id).first()
    if not obj:
        raise NotFound('Patient not found')
    if user.role in STAFF_ROLES:
        return obj
    if obj.user_id != user.id:
        raise PermissionDenied('You can only view your own profile')
    return obj


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def patients(request):
    if request.method == 'POST':
        s = PatientCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        profile = patient_service.create_patient(s.validated_data)
        log_action(user=request.user, action='create_patient', object_type='patient', object_id=profile.id)
        return Response(
            {'message': 'Patient created successfully', 'patient': patient_dict(profile)}, status=201
        )

    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = Patient.objects.select_related('user')
    if vd['search']:
        term = vd['search']
        qs = qs.filter(
            Q(user__first_name__icontains=term)
            | Q(user__last_name__icontains=term)
            | Q(user__email__icontains=term)
        )
    items, pagination = paginate(qs.order_by('-created_at', '-id'), page=vd['page'], limit=vd['limit'])
    return Response({'patients': [patient_dict(p) for p in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def patient_detail(request, patient_id: int):
    profile = _check_patient_object_scope(request.user, patient_id)

    if request.method == 'GET':
        data = patient_dict(profile)
        recent = appointment_queryset().filter(patient=profile).order_by('-date', '-time')[:10]
        data['appointments'] = [appointment_dict(a) for a in recent]
        return Response({'patient': data})

    if request.method == 'PUT':
        if request.user.role not in STAFF_ROLES:
            raise PermissionDenied('Insufficient permissions')
        s = PatientUpdateSerializer(data=request.data, context={'instance': profile})
        s.is_valid(raise_exception=True)
        profile = patient_service.update_patient(profile, s.validated_data)
        return Response({'message': 'Patient updated successfully', 'patient': patient_dict(profile)})

    if request.user.role != User.ROLE_ADMIN:
        raise PermissionDenied('Insufficient permissions')
    patient_service.delete_patient(profile)
    log_action(user=request.user, action='delete_patient', object_type='patient', object_id=patient_id)
    logger.info("Patient %s deleted by %s", patient_id, request.user.id)
    return Response({'message': 'Patient deleted successfully'})
