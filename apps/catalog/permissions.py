from rest_framework import permissions


def _is_operator(user):
    if not user or not user.is_authenticated:
        return False
    can_manage = getattr(user, 'can_manage_catalog', None)
    if can_manage is None:
        return bool(user.is_staff or user.is_superuser)
    return can_manage()


class IsOperatorOrReadOnly(permissions.BasePermission):
    """
    Permission that allows:
    - Read access for everyone (GET, HEAD, OPTIONS) - including unauthenticated users
    - Write access (POST, PUT, PATCH, DELETE) only for operators and admins
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return _is_operator(request.user)


class IsOperator(permissions.BasePermission):
    """Operators and admins only, for reads as well as writes."""

    def has_permission(self, request, view):
        return _is_operator(request.user)
