"""
Role based permission classes.

Every user carries exactly one role; access checks are plain membership
tests against the roles an endpoint allows.
"""
from rest_framework.permissions import BasePermission

from .models import User

STAFF_ROLES = {User.ROLE_ADMIN, User.ROLE_DOCTOR, User.ROLE_STAFF}


def user_role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class HasRole(BasePermission):
    """Allow access only to users whose role is in ``allowed_roles``."""
    allowed_roles: frozenset = frozenset()
    message = "Insufficient permissions"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return user_role(request) in self.allowed_roles


def roles(*names: str) -> type:
    """Build a :class:`HasRole` subclass for the given role names.

    Usage: ``@permission_classes([IsAuthenticated, roles('ADMIN', 'STAFF')])``
    """
    return type(
        "HasRole_" + "_".join(names),
        (HasRole,),
        {"allowed_roles": frozenset(names)},
    )


class IsAdminRole(HasRole):
    """Administrators only."""
    allowed_roles = frozenset({User.ROLE_ADMIN})


class IsClinicalStaff(HasRole):
    """Admins, doctors and front desk staff."""
    allowed_roles = frozenset(STAFF_ROLES)

