"""
Bearer token authentication for the API.

Clients send ``Authorization: Bearer <jwt>``.  The token carries the user
id; the user row is loaded on every request so that deactivated accounts
lose access immediately.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed


class BearerJWTAuthentication(JWTAuthentication):
    """JWT authentication that also rejects inactive users.

    simplejwt already refuses inactive users when loading them; the extra
    check keeps the behaviour explicit and gives a stable error message.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if not user.is_active:
            raise AuthenticationFailed('Invalid or inactive user', code='user_inactive')
        return user
