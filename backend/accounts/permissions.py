# accounts/permissions.py
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """
    Allows access only to users with role == 'admin'.
    Authentication is checked separately (IsAuthenticated), so a missing
    identity stays a 401 and a wrong role becomes a 403.
    """
    message = "Access denied. Admin only."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "role", None) == "admin"
