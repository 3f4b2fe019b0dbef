"""
ABHA flows: registration and login OTP sessions, status, unlink and reporting.

Session state machine::

    register: initiated -> otp_sent -> completed | failed | expired
    login:    initiated -> otp_sent -> authenticated | failed | expired
"""

from __future__ import annotations

import logging
import re
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from clinic_backend.core.exceptions import InvalidRequest
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.models import Patient
from clinic_backend.patients.services import generate_uhid, normalize_gender

from .client import AbdmApiError, AbdmClient
from .models import (
    AbhaAccount,
    AbhaConsent,
    AbhaLoginSession,
    AbhaMeta,
    AbhaRecordLink,
    AbhaRegistrationSession,
)
from .serializers import AbhaRecordLinkSerializer

logger = logging.getLogger(__name__)

AADHAAR_RE = re.compile(r'^\d{12}$')
HFR_META_KEY = 'hfr_id'
TOKEN_LIFETIME = timedelta(minutes=30)


def new_session_id() -> str:
    return secrets.token_hex(16)


def session_expiry():
    return timezone.now() + timedelta(seconds=settings.ABHA_SESSION_EXPIRY_SECONDS)


def get_hfr_id() -> str:
    value = AbhaMeta.objects.filter(meta_key=HFR_META_KEY).values_list('meta_value', flat=True).first()
    return value or settings.ABDM_FACILITY_ID or ''


def set_hfr_id(hfr_id: str) -> str:
    AbhaMeta.objects.update_or_create(meta_key=HFR_META_KEY, defaults={'meta_value': hfr_id})
    logger.info('HFR id set to %s', hfr_id)
    return hfr_id


def _fail_session(session, exc: AbdmApiError) -> None:
    session.status = session.STATUS_FAILED
    session.error_message = exc.message
    session.response_data = {'error': exc.message}
    session.save(update_fields=['status', 'error_message', 'response_data', 'updated_at'])


def _open_session(model, session_id: str):
    session = (
        model.objects.select_related('patient')
        .filter(session_id=session_id, status=model.STATUS_OTP_SENT, expires_at__gt=timezone.now())
        .first()
    )
    if session is None:
        raise InvalidRequest('Invalid or expired session')
    return session


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def initiate_registration(*, aadhaar_number: str, mobile_number: str = '', patient: Patient | None = None,
                          client: AbdmClient | None = None) -> dict:
    """Start ABHA enrolment by Aadhaar: ABDM sends an OTP to the Aadhaar mobile."""
    if not AADHAAR_RE.match(aadhaar_number or ''):
        raise InvalidRequest('Invalid Aadhaar number format. Must be 12 digits.')
    if patient is not None and patient.abha_number:
        raise InvalidRequest('Patient already has an ABHA number', abha_number=patient.abha_number)

    client = client or AbdmClient()
    session = AbhaRegistrationSession.objects.create(
        session_id=new_session_id(),
        patient=patient,
        aadhaar_masked=f"********{aadhaar_number[-4:]}",
        mobile_number=mobile_number or '',
        expires_at=session_expiry(),
        request_data={'patient_id': patient.pk if patient else None},
    )

    try:
        data = client.register_generate_otp(
            aadhaar_number,
            mobile_number,
            patient_id=patient.pk if patient else None,
            session_id=session.session_id,
        )
    except AbdmApiError as exc:
        _fail_session(session, exc)
        raise

    txn_id = data.get('txnId')
    if txn_id:
        session.txn_id = txn_id
        session.status = AbhaRegistrationSession.STATUS_OTP_SENT
        session.response_data = data
        session.save(update_fields=['txn_id', 'status', 'response_data', 'updated_at'])

    return {
        'success': True,
        'session_id': session.session_id,
        'txn_id': txn_id,
        'message': 'OTP sent to Aadhaar registered mobile number',
        'expires_in': settings.ABHA_SESSION_EXPIRY_SECONDS,
    }


def _abha_number_of(data: dict) -> str:
    return data.get('ABHANumber') or data.get('healthIdNumber') or ''


def _abha_address_of(data: dict) -> str:
    return data.get('healthId') or data.get('preferredAbhaAddress') or ''


def _full_name_of(data: dict) -> str:
    name = data.get('name') or data.get('fullName')
    if name:
        return name
    return f"{data.get('firstName') or ''} {data.get('lastName') or ''}".strip()


def _patient_from_abha(data: dict, abha_number: str, abha_address: str) -> Patient:
    return Patient.objects.create(
        uhid=generate_uhid(),
        name=_full_name_of(data) or abha_number,
        phone=data.get('mobile') or '',
        email=data.get('email') or '',
        gender=normalize_gender(data.get('gender')),
        address=data.get('address') or '',
        state=data.get('stateName') or data.get('state') or '',
        district=data.get('districtName') or data.get('district') or '',
        pincode=str(data.get('pincode') or ''),
        abha_number=abha_number,
        abha_address=abha_address,
        health_id=abha_address,
    )


def _upsert_account(patient: Patient, data: dict, abha_number: str, abha_address: str) -> AbhaAccount:
    """Create or refresh the patient's account row.

    A patient has at most one account. Re-registering after an unlink
    reuses that row even when ABDM issues a different ABHA number.
    """
    by_number = AbhaAccount.objects.select_for_update().filter(abha_number=abha_number).first()
    by_patient = AbhaAccount.objects.select_for_update().filter(patient=patient).first()
    if by_number is not None and by_patient is not None and by_number.pk != by_patient.pk:
        by_patient.patient = None
        by_patient.save(update_fields=['patient', 'updated_at'])
    account = by_number or by_patient or AbhaAccount()

    fields = {
        'abha_number': abha_number,
        'patient': patient,
        'abha_address': abha_address,
        'health_id': abha_address,
        'name': _full_name_of(data),
        'first_name': data.get('firstName') or '',
        'middle_name': data.get('middleName') or '',
        'last_name': data.get('lastName') or '',
        'gender': (data.get('gender') or '').lower(),
        'date_of_birth': data.get('dateOfBirth') or data.get('dob') or '',
        'mobile': data.get('mobile') or '',
        'email': data.get('email') or '',
        'address': data.get('address') or '',
        'district': data.get('districtName') or data.get('district') or '',
        'state': data.get('stateName') or data.get('state') or '',
        'pincode': str(data.get('pincode') or ''),
        'kyc_verified': bool(data.get('kycVerified')),
        'aadhaar_verified': True,
        'mobile_verified': bool(data.get('mobile')),
        'email_verified': bool(data.get('email')),
        'status': AbhaAccount.STATUS_ACTIVE,
        'abdm_token': data.get('token') or data.get('xToken') or '',
    }
    for name, value in fields.items():
        setattr(account, name, value)
    account.save()
    return account


def verify_registration(*, session_id: str, otp: str, txn_id: str | None = None, user=None,
                        client: AbdmClient | None = None) -> dict:
    """Verify the enrolment OTP, then link (or create) the patient and account."""
    session = _open_session(AbhaRegistrationSession, session_id)
    client = client or AbdmClient()

    try:
        data = client.register_verify_otp(
            otp,
            txn_id or session.txn_id,
            patient_id=session.patient_id,
            session_id=session.session_id,
        )
    except AbdmApiError as exc:
        _fail_session(session, exc)
        raise

    patient = session.patient
    abha_number = _abha_number_of(data)
    abha_address = _abha_address_of(data)
    with transaction.atomic():
        if abha_number:
            if patient is None:
                patient = _patient_from_abha(data, abha_number, abha_address)
                session.patient = patient
            else:
                patient.abha_number = abha_number
                patient.abha_address = abha_address
                patient.health_id = abha_address
                patient.save(update_fields=['abha_number', 'abha_address', 'health_id', 'updated_at'])
            _upsert_account(patient, data, abha_number, abha_address)
        session.status = AbhaRegistrationSession.STATUS_COMPLETED
        session.response_data = data
        session.save(update_fields=['status', 'response_data', 'patient', 'updated_at'])

    if abha_number:
        log_patient_action(user, 'abha_register', patient_id=patient.pk, meta={'abha_number': abha_number})

    return {
        'success': True,
        'message': 'ABHA registration completed successfully',
        'abha_number': abha_number or None,
        'abha_address': abha_address or None,
        'patient_id': patient.pk if patient else None,
        'patient': (
            {
                'id': patient.pk,
                'uhid': patient.uhid,
                'name': patient.name,
                'phone': patient.phone,
                'email': patient.email,
            }
            if patient
            else None
        ),
        'has_abha': True,
        'linked': True,
        'data': data,
    }


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def initiate_login(*, patient: Patient, abha_address: str, auth_method: str = 'aadhaar_otp',
                   client: AbdmClient | None = None) -> dict:
    client = client or AbdmClient()
    session = AbhaLoginSession.objects.create(
        session_id=new_session_id(),
        patient=patient,
        abha_address=abha_address,
        auth_method=auth_method,
        expires_at=session_expiry(),
    )

    try:
        data = client.login_request_otp(abha_address, auth_method, patient_id=patient.pk, session_id=session.session_id)
    except AbdmApiError as exc:
        _fail_session(session, exc)
        raise

    txn_id = data.get('txnId')
    if txn_id:
        session.txn_id = txn_id
        session.status = AbhaLoginSession.STATUS_OTP_SENT
        session.response_data = data
        session.save(update_fields=['txn_id', 'status', 'response_data', 'updated_at'])

    return {
        'success': True,
        'session_id': session.session_id,
        'txn_id': txn_id,
        'message': 'OTP sent to registered mobile number',
        'expires_in': settings.ABHA_SESSION_EXPIRY_SECONDS,
    }


def verify_login(*, session_id: str, otp: str, txn_id: str | None = None, user=None,
                 client: AbdmClient | None = None) -> dict:
    """Verify the login OTP; fresh ABDM tokens are stored on the patient's account."""
    session = _open_session(AbhaLoginSession, session_id)
    client = client or AbdmClient()

    try:
        data = client.login_verify_otp(
            otp,
            txn_id or session.txn_id,
            patient_id=session.patient_id,
            session_id=session.session_id,
        )
    except AbdmApiError as exc:
        _fail_session(session, exc)
        raise

    session.status = AbhaLoginSession.STATUS_AUTHENTICATED
    session.response_data = data
    session.save(update_fields=['status', 'response_data', 'updated_at'])

    if _abha_number_of(data):
        AbhaAccount.objects.filter(patient_id=session.patient_id).update(
            abdm_token=data.get('token') or data.get('xToken') or '',
            refresh_token=data.get('refreshToken') or '',
            token_expires_at=timezone.now() + TOKEN_LIFETIME,
            status=AbhaAccount.STATUS_ACTIVE,
            updated_at=timezone.now(),
        )
    log_patient_action(user, 'abha_login', patient_id=session.patient_id)

    return {'success': True, 'message': 'ABHA login successful', 'data': data}


# ---------------------------------------------------------------------------
# Status, records, unlink
# ---------------------------------------------------------------------------

def _record_rows(patient: Patient) -> list[dict]:
    return AbhaRecordLinkSerializer(AbhaRecordLink.objects.filter(patient=patient), many=True).data


def abha_status(patient: Patient) -> dict:
    account = AbhaAccount.objects.filter(patient=patient).first()
    if account is None:
        return {'has_abha': False, 'message': 'No ABHA account linked'}

    return {
        'has_abha': True,
        'abha_number': account.abha_number,
        'abha_address': account.abha_address,
        'status': account.status,
        'kyc_verified': account.kyc_verified,
        'aadhaar_verified': account.aadhaar_verified,
        'mobile_verified': account.mobile_verified,
        'registered_at': account.registered_at,
        'hfr_id': get_hfr_id() or None,
        'records': _record_rows(patient),
    }


def unlink_abha(patient: Patient, *, user=None) -> None:
    with transaction.atomic():
        patient.abha_number = ''
        patient.abha_address = ''
        patient.health_id = ''
        patient.save(update_fields=['abha_number', 'abha_address', 'health_id', 'updated_at'])
        AbhaAccount.objects.filter(patient=patient).update(
            status=AbhaAccount.STATUS_DEACTIVATED,
            updated_at=timezone.now(),
        )
    log_patient_action(user, 'abha_unlink', patient_id=patient.pk)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def _date_range(qs, start=None, end=None):
    if start:
        qs = qs.filter(created_at__date__gte=start)
    if end:
        qs = qs.filter(created_at__date__lte=end)
    return qs


def abha_stats(start=None, end=None) -> dict:
    """Account and consent counts created within ``start``..``end`` (both default to today)."""
    today = timezone.localdate()
    start = start or today
    end = end or today

    accounts = _date_range(AbhaAccount.objects.all(), start, end).aggregate(
        total=Count('id'),
        kyc_count=Count('id', filter=Q(kyc_verified=True)),
    )
    consents = _date_range(AbhaConsent.objects.all(), start, end).aggregate(
        given=Count('id', filter=Q(status=AbhaConsent.STATUS_GRANTED)),
        declined=Count('id', filter=Q(status__in=[AbhaConsent.STATUS_DENIED, AbhaConsent.STATUS_REVOKED])),
    )

    return {
        'total': accounts['total'],
        'kyc_count': accounts['kyc_count'],
        'non_kyc_count': accounts['total'] - accounts['kyc_count'],
        'consent_given': consents['given'],
        'consent_declined': consents['declined'],
    }


def abha_dashboard(start=None, end=None) -> dict:
    consents = AbhaConsent.objects.all()
    if start and end:
        consents = _date_range(consents, start, end)

    return {
        'hfr_id': get_hfr_id(),
        'total_patients': Patient.objects.count(),
        'linked_patients': Patient.objects.exclude(abha_number='').count(),
        'consent_requests': consents.count(),
        'pending_uploads': AbhaRecordLink.objects.filter(upload_status=AbhaRecordLink.UPLOAD_PENDING).count(),
        'last_updated': timezone.now().isoformat(),
    }


def expire_stale_sessions(now=None) -> int:
    """Mark open registration/login sessions past their expiry as ``expired``."""
    now = now or timezone.now()
    total = 0
    for model in (AbhaRegistrationSession, AbhaLoginSession):
        total += model.objects.filter(
            status__in=[model.STATUS_INITIATED, model.STATUS_OTP_SENT],
            expires_at__lte=now,
        ).update(status=model.STATUS_EXPIRED, updated_at=now)
    if total:
        logger.info('Expired %d stale ABHA sessions', total)
    return total
