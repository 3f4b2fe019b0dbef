from clinic_backend.core.permissions import (
    ALL_STAFF_ROLES,
    CLINICAL_ROLES,
    FRONT_DESK_ROLES,
    RBACPermission,
)


class PatientPermission(RBACPermission):
    """RBAC for patient master data.

    - admin, doctor, assistant, reception, nurse: read + write
    - billing: read-only
    - delete: admin only
    """

    read_roles = ALL_STAFF_ROLES
    write_roles = FRONT_DESK_ROLES

    def has_object_permission(self, request, view, obj):
        if request.method == "DELETE":
            return self._role_name(request) == "admin"
        return True


class PatientClinicalPermission(RBACPermission):
    """Allergies, family history, vitals and uploaded records."""

    read_roles = CLINICAL_ROLES | {"reception"}
    write_roles = CLINICAL_ROLES


class InsurancePolicyPermission(RBACPermission):
    read_roles = ALL_STAFF_ROLES
    write_roles = {"admin", "assistant", "reception", "billing"}
