from clinic_backend.core.permissions import ALL_STAFF_ROLES, CLINICAL_ROLES, RBACPermission


class PrescriptionPermission(RBACPermission):
    """RBAC for prescriptions.

    - admin, doctor: read + write
    - assistant, nurse, reception: read-only
    - billing: no access
    """

    read_roles = CLINICAL_ROLES | {"reception"}
    write_roles = {"admin", "doctor"}


class PrescriptionTemplatePermission(RBACPermission):
    read_roles = CLINICAL_ROLES
    write_roles = {"admin", "doctor"}


class FollowUpPermission(RBACPermission):
    read_roles = ALL_STAFF_ROLES
    write_roles = set()
