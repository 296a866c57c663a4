from rest_framework import permissions

from .models import User


class HasRole(permissions.BasePermission):
    allowed_roles = ()

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.has_role(*self.allowed_roles))


class IsAdmin(HasRole):
    allowed_roles = (User.Role.ADMIN,)


class IsManagerOrAdmin(HasRole):
    allowed_roles = (User.Role.ADMIN, User.Role.MANAGER)


class CanRecordTransactions(HasRole):
    allowed_roles = (User.Role.ADMIN, User.Role.MANAGER, User.Role.USER)


class RolePermissionMixin:
    """
    Picks permission classes per HTTP method: reads for any authenticated
    user, writes and deletes gated by role.
    """

    read_permission_classes = [permissions.IsAuthenticated]
    write_permission_classes = [permissions.IsAuthenticated, IsManagerOrAdmin]
    delete_permission_classes = [permissions.IsAuthenticated, IsAdmin]

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            classes = self.read_permission_classes
        elif self.request.method == "DELETE":
            classes = self.delete_permission_classes
        else:
            classes = self.write_permission_classes
        return [permission() for permission in classes]
