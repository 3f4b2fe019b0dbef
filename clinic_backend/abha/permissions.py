from clinic_backend.core.permissions import FRONT_DESK_ROLES, RBACPermission


class AbhaPermission(RBACPermission):
    """RBAC for ABHA linking.

    - admin, doctor, assistant, reception: read + write
    - nurse: read-only
    - billing: no access
    """

    read_roles = FRONT_DESK_ROLES
    write_roles = {"admin", "doctor", "assistant", "reception"}


class AbhaSettingsPermission(RBACPermission):
    """Facility HFR id: everyone at the front desk reads it, admins change it."""

    read_roles = FRONT_DESK_ROLES
    write_roles = {"admin"}
