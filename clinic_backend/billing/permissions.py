from clinic_backend.core.permissions import ALL_STAFF_ROLES, RBACPermission


class BillPermission(RBACPermission):
    """RBAC for bills and payments.

    - admin, billing, reception, assistant, doctor: read + write
    - nurse: read-only
    """

    read_roles = ALL_STAFF_ROLES
    write_roles = {"admin", "billing", "reception", "assistant", "doctor"}


class ReceiptTemplatePermission(RBACPermission):
    read_roles = ALL_STAFF_ROLES
    write_roles = {"admin", "billing", "doctor"}


class SubscriptionPackagePermission(RBACPermission):
    """Doctors manage their own packages; clinic-wide packages are admin-only."""

    read_roles = ALL_STAFF_ROLES
    write_roles = {"admin", "doctor"}
    doctor_field = "doctor_id"

    def has_object_permission(self, request, view, obj):
        if request.method not in ("GET", "HEAD", "OPTIONS") and self._role_name(request) == "doctor":
            return obj.doctor_id == request.user.id
        return super().has_object_permission(request, view, obj)


class SubscriptionPermission(RBACPermission):
    read_roles = ALL_STAFF_ROLES
    write_roles = {"admin", "billing", "reception", "assistant", "doctor"}
