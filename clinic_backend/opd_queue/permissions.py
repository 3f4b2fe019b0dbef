from clinic_backend.core.permissions import ALL_STAFF_ROLES, FRONT_DESK_ROLES, RBACPermission


class QueuePermission(RBACPermission):
    """RBAC for the OPD queue.

    - front desk and clinical staff: read + write
    - billing: read-only
    - doctor: only entries assigned to them (or unassigned)
    """

    read_roles = ALL_STAFF_ROLES
    write_roles = FRONT_DESK_ROLES
    doctor_field = "doctor_id"
