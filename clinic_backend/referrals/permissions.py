from clinic_backend.core.permissions import CLINICAL_ROLES, RBACPermission


class ReferralPermission(RBACPermission):
    """RBAC for referrals and the referral network.

    - admin, doctor, assistant: read + write
    - nurse, reception: read-only
    - doctors only touch referrals they made
    """

    read_roles = CLINICAL_ROLES | {"reception"}
    write_roles = {"admin", "doctor", "assistant"}
    doctor_field = "referred_by_id"


class ReferralNetworkPermission(RBACPermission):
    read_roles = CLINICAL_ROLES | {"reception"}
    write_roles = {"admin", "doctor", "assistant"}
    doctor_field = "created_by_id"
