# PATH: apps/domains/attempts/permissions.py
from __future__ import annotations

from rest_framework.permissions import BasePermission


def is_admin_user(u) -> bool:
    return bool(
        u
        and u.is_authenticated
        and (getattr(u, "is_superuser", False) or getattr(u, "is_staff", False))
    )


class IsAdminOrStaff(BasePermission):
    """
    관리자 / 운영자 전용 Permission
    """
    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsAttemptOwnerOrStaff(BasePermission):
    """
    attempt 본인 또는 관리자만.
    obj 는 도메인 엔티티 Attempt (user_id 는 문자열).
    """
    message = "You do not have access to this attempt."

    def has_object_permission(self, request, view, obj):
        if is_admin_user(request.user):
            return True
        return str(getattr(obj, "user_id", "")) == str(request.user.pk)
