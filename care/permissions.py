"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission

STAFF_ROLES = {"admin", "physician"}


def is_staff_user(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) in STAFF_ROLES)


def is_admin_user(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) == "admin")


class IsStaffRole(BasePermission):
    """Allow access only to administrators and physicians."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_staff_user(getattr(request, "user", None))


class IsAdminRole(BasePermission):
    """Only administrators."""
    def has_permission(self, request, view) -> bool:
        return is_admin_user(getattr(request, "user", None))
