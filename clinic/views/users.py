from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import User
from clinic.permissions import IsAdminRole
from clinic.serializers.auth import UserAdminUpdateSerializer, UserListQuerySerializer
from clinic.serializers.output import user_dict
from clinic.services.audit import log_action
from clinic.services.pagination import paginate

# admin update key -> User column
USER_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'phone': 'phone',
    'email': 'email',
    'role': 'role',
    'isActive': 'is_active',
}


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_users(request):
    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data

    qs = User.objects.all()
    if vd['search']:
        term = vd['search']
        qs = qs.filter(
            Q(first_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(email__icontains=term)
            | Q(username__icontains=term)
        )
    if vd.get('role'):
        qs = qs.filter(role=vd['role'])
    items, pagination = paginate(qs.order_by('-date_joined', '-id'), page=vd['page'], limit=vd['limit'])
    return Response({'users': [user_dict(u) for u in items], 'pagination': pagination})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, user_id: int):
    user = get_object_or_404(User, pk=user_id)

    if request.method == 'GET':
        return Response({'user': user_dict(user)})

    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            raise ValidationError('You cannot deactivate your own account')
        user.is_active = False
        user.save(update_fields=['is_active', 'updated_at'])
        log_action(user=request.user, action='deactivate_user', object_type='user', object_id=user.id)
        return Response({'message': 'User deactivated successfully'})

    s = UserAdminUpdateSerializer(data=request.data, context={'instance': user})
    s.is_valid(raise_exception=True)
    changed = []
    for key, column in USER_FIELDS.items():
        if key in s.validated_data:
            setattr(user, column, s.validated_data[key])
            changed.append(column)
    if changed:
        user.save(update_fields=changed + ['updated_at'])
        log_action(user=request.user, action='update_user', object_type='user', object_id=user.id,
                   detail={'fields': changed})
    return Response({'message': 'User updated successfully', 'user': user_dict(user)})
