"""
Authentication endpoints.

Login is by email (or username) and password and returns a JWT access and
refresh pair.  The role always comes from the stored user; anything the
client sends in a ``role`` field is ignored.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import Patient, User
from clinic.serializers.auth import (
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
)
from clinic.serializers.output import user_dict
from clinic.services.audit import client_ip, log_action
from clinic.services.patients import create_patient_user

logger = logging.getLogger(__name__)


def _token_payload(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        'token': str(refresh.access_token),
        'refresh': str(refresh),
        'user': user_dict(user),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    login = s.validated_data['login']
    password = s.validated_data['password']

    account = User.objects.filter(email__iexact=login).first() or User.objects.filter(username=login).first()
    user = authenticate(request, username=account.username, password=password) if account else None
    if user is None:
        logger.warning("Failed login for %s from %s", login, client_ip(request))
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'login': login, 'ip': client_ip(request)})
        raise ValidationError('Invalid email or password')

    update_last_login(None, user)
    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': client_ip(request)})
    return Response({'message': 'Login successful', **_token_payload(user)})

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """Self sign-up; always creates a PATIENT account with an empty profile."""
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        user = create_patient_user(
            first_name=vd['firstName'],
            last_name=vd['lastName'],
            email=vd['email'],
            phone=vd.get('phone') or '',
            password=vd['password'],
        )
        Patient.objects.create(user=user)
    log_action(user=user, action='register', object_type='user', object_id=user.id,
               detail={'ip': client_ip(request)})
    return Response({'message': 'User registered successfully', **_token_payload(user)}, status=201)


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Exchange a refresh token for a new access token."""
    raw = request.data.get('refresh')
    if not raw:
        raise ValidationError({'refresh': ['This field is required.']})
    try:
        refresh = RefreshToken(raw)
    except TokenError as e:
        raise InvalidToken(str(e))
    return Response({'token': str(refresh.access_token)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    raw = request.data.get('refresh')
    count = 0
    if raw:
        try:
            RefreshToken(raw).blacklist()
            count = 1
        except TokenError as e:
            raise ValidationError(str(e))
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    return Response({'message': 'Logged out', 'blacklisted': count})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def me_view(request):
    user: User = request.user
    if request.method == 'PUT':
        s = ProfileUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        changed = []
        for key, column in (('firstName', 'first_name'), ('lastName', 'last_name'), ('phone', 'phone')):
            if key in s.validated_data:
                setattr(user, column, s.validated_data[key])
                changed.append(column)
        if changed:
            user.save(update_fields=changed + ['updated_at'])
        return Response({'message': 'Profile updated successfully', 'user': user_dict(user)})
    return Response({'user': user_dict(user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    user: User = request.user
    s = ChangePasswordSerializer(data=request.data, context={'user': user})
    s.is_valid(raise_exception=True)
    if not user.check_password(s.validated_data['currentPassword']):
        raise ValidationError({'currentPassword': ['Current password is incorrect']})
    user.set_password(s.validated_data['newPassword'])
    user.save(update_fields=['password', 'updated_at'])
    log_action(user=user, action='change_password', object_type='user', object_id=user.id)
    return Response({'message': 'Password changed successfully'})
