import logging

from django.db import transaction
from django.db.models import F

from clinic_backend.core.exceptions import InvalidRequest
from clinic_backend.core.utils import log_patient_action

from .models import PatientReferral, ReferralDoctor

logger = logging.getLogger(__name__)

# Fields a referral update may touch.
REFERRAL_UPDATE_FIELDS = (
    'referred_doctor_name',
    'referred_doctor_phone',
    'referred_doctor_email',
    'specialty',
    'hospital_name',
    'referral_date',
    'referral_time',
    'reason',
    'priority',
    'status',
    'notes',
    'outcome',
)

NETWORK_UPDATE_FIELDS = (
    'name',
    'specialization',
    'hospital',
    'hospital_address',
    'city',
    'state',
    'phone',
    'email',
    'notes',
    'is_preferred',
    'is_active',
)


def create_referral(*, patient, referral_date, referred_to_doctor=None, user=None, **fields) -> PatientReferral:
    """Create a referral; a network doctor's ``referral_count`` goes up by one."""
    if referred_to_doctor is None and not fields.get('referred_doctor_name'):
        raise InvalidRequest('Either referred doctor ID or name is required')

    with transaction.atomic():
        referral = PatientReferral.objects.create(
            patient=patient,
            referred_by=user if getattr(user, 'is_authenticated', False) else None,
            referred_to_doctor=referred_to_doctor,
            referral_date=referral_date,
            priority=fields.pop('priority', None) or PatientReferral.PRIORITY_ROUTINE,
            **fields,
        )
        if referred_to_doctor is not None:
            ReferralDoctor.objects.filter(pk=referred_to_doctor.pk).update(referral_count=F('referral_count') + 1)

    log_patient_action(user, 'referral_create', patient_id=patient.pk, meta={'referral_id': referral.pk})
    return referral


def pick_update_fields(data, allowed) -> dict:
    """Keep only allow-listed keys; an empty result is a 400."""
    updates = {key: data[key] for key in allowed if key in data}
    if not updates:
        raise InvalidRequest('No fields to update')
    return updates
