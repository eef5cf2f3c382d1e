"""
Custom permission classes for role based access control.

Roles are plain Django auth groups whose names come from settings
(``RECEPTION_GROUP`` and ``BILLING_GROUP``).  Superusers pass every
role check; ``is_staff`` users also count as reception.
"""
from django.conf import settings
from rest_framework.permissions import BasePermission, SAFE_METHODS


def _in_group(user, name: str) -> bool:
    return user.groups.filter(name=name).exists()


def is_scheduling_staff(user) -> bool:
    if not (user and user.is_authenticated):
        return False
    return bool(user.is_staff or user.is_superuser or _in_group(user, settings.RECEPTION_GROUP))


def is_billing_staff(user) -> bool:
    if not (user and user.is_authenticated):
        return False
    return bool(user.is_superuser or _in_group(user, settings.BILLING_GROUP))


class IsSchedulingStaffOrReadOnly(BasePermission):
    """Reads for any authenticated user; writes for reception/staff."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return is_scheduling_staff(request.user)


class IsSchedulingStaff(BasePermission):
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_scheduling_staff(request.user)


class IsBillingStaffOrReadOnly(BasePermission):
    """Reads for any authenticated user; invoice generation for billing."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return is_billing_staff(request.user)
