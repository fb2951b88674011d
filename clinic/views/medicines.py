from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Medicine, User
from clinic.permissions import roles
from clinic.serializers.medicine import (
    MedicineCreateSerializer,
    MedicineListQuerySerializer,
    MedicineUpdateSerializer,
    StockUpdateSerializer,
)
from clinic.serializers.output import medicine_dict
from clinic.services import medicines as inventory
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

logger = logging.getLogger(__name__)

IsPharmacyStaff = roles(User.ROLE_ADMIN, User.ROLE_STAFF)
PHARMACY_ROLES = IsPharmacyStaff.allowed_roles


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def medicines(request):
    if request.method == 'POST':
        if request.user.role not in PHARMACY_ROLES:
            raise PermissionDenied('Insufficient permissions')
        s = MedicineCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        medicine = Medicine.objects.create(**s.to_model_fields())
        log_action(user=request.user, action='create_medicine', object_type='medicine', object_id=medicine.id)
        return Response({'message': 'Medicine created successfully', 'medicine': medicine_dict(medicine)},
                        status=201)

    q = MedicineListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = inventory.search_medicines(search=vd['search'], category=vd['category'], low_stock=vd['lowStock'])
    items, pagination = paginate(qs, page=vd['page'], limit=vd['limit'])
    return Response({'medicines': [medicine_dict(m) for m in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def medicine_detail(request, medicine_id: int):
    medicine = get_object_or_404(Medicine, pk=medicine_id)

    if request.method == 'GET':
        return Response({'medicine': medicine_dict(medicine)})

    if request.method == 'PUT':
        if request.user.role not in PHARMACY_ROLES:
            raise PermissionDenied('Insufficient permissions')
        s = MedicineUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        for column, value in s.to_model_fields().items():
            setattr(medicine, column, value)
        medicine.save()
        return Response({'message': 'Medicine updated successfully', 'medicine': medicine_dict(medicine)})

    if request.user.role != User.ROLE_ADMIN:
        raise PermissionDenied('Insufficient permissions')
    medicine.delete()
    log_action(user=request.user, action='delete_medicine', object_type='medicine', object_id=medicine_id)
    return Response({'message': 'Medicine deleted successfully'})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPharmacyStaff])
def update_stock(request, medicine_id: int):
    get_object_or_404(Medicine, pk=medicine_id)
    s = StockUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    medicine, previous = inventory.adjust_stock(medicine_id, s.validated_data['stock'], s.validated_data['operation'])
    logger.info("Stock of medicine %s: %s -> %s (%s)", medicine.id, previous, medicine.stock,
                s.validated_data['operation'])
    log_action(user=request.user, action='update_stock', object_type='medicine', object_id=medicine.id,
               detail={'previous': previous, 'stock': medicine.stock, 'operation': s.validated_data['operation']})
    return Response({
        'message': 'Stock updated successfully',
        'medicine': medicine_dict(medicine),
        'previousStock': previous,
        'newStock': medicine.stock,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyStaff])
def low_stock_alerts(request):
    items = list(inventory.low_stock())
    return Response({'medicines': [medicine_dict(m) for m in items], 'count': len(items)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyStaff])
def expired_alerts(request):
    items = list(inventory.expired())
    return Response({'medicines': [medicine_dict(m) for m in items], 'count': len(items)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPharmacyStaff])
def expiring_soon_alerts(request):
    items = list(inventory.expiring_soon())
    return Response({'medicines': [medicine_dict(m) for m in items], 'count': len(items)})
