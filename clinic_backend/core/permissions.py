"""Core permissions for RBAC (Role-Based Access Control).

This module provides the base permission class used by every app,
following the read_roles/write_roles pattern.

Standard roles: admin, doctor, assistant, reception, nurse, billing
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS


ALL_STAFF_ROLES = {"admin", "doctor", "assistant", "reception", "nurse", "billing"}
CLINICAL_ROLES = {"admin", "doctor", "assistant", "nurse"}
FRONT_DESK_ROLES = {"admin", "doctor", "assistant", "reception", "nurse"}


def role_name_of(user):
    role = getattr(user, "role", None)
    return getattr(role, "name", None)


class RBACPermission(BasePermission):
    """Base class for RBAC permissions with read_roles/write_roles pattern.

    Subclasses should define:
    - read_roles: set of role names that can perform GET/HEAD/OPTIONS
    - write_roles: set of role names that can perform POST/PUT/PATCH/DELETE
    - doctor_field (optional): attribute on the object that holds the owning
      doctor's id; doctors may only touch objects they own.

    Example:
        class MyPermission(RBACPermission):
            read_roles = {"admin", "assistant", "doctor", "billing"}
            write_roles = {"admin", "assistant"}
    """

    read_roles: set = set()
    write_roles: set = set()
    doctor_field: str | None = None

    def _role_name(self, request):
        return role_name_of(getattr(request, "user", None))

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        role_name = self._role_name(request)
        if not role_name:
            return False

        if request.method in SAFE_METHODS:
            return role_name in self.read_roles

        return role_name in self.write_roles

    def has_object_permission(self, request, view, obj):
        if self.doctor_field and self._role_name(request) == "doctor":
            owner_id = getattr(obj, self.doctor_field, None)
            # Unassigned records stay visible to every doctor.
            return owner_id is None or owner_id == getattr(request.user, "id", None)
        return True


class IsAdmin(RBACPermission):
    """Permission: user must have admin role."""

    read_roles = {"admin"}
    write_roles = {"admin"}
