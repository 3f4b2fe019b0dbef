"""
Thin HTTP client for the ABDM (Ayushman Bharat Digital Mission) ABHA APIs.

Every call is written to ``AbhaApiLog``. Aadhaar numbers and OTPs never
reach the log table in clear text.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests
from django.conf import settings
from rest_framework import status

from clinic_backend.core.exceptions import ClinicError

from .models import AbhaApiLog

logger = logging.getLogger(__name__)

REGISTER_PATH = '/abha/v3/register/aadhaar'
LOGIN_PATH = '/abha/v3/login'

MASK = '****'
MASKED_KEYS = {'aadhaar', 'otp'}


class AbdmApiError(ClinicError):
    """ABDM rejected the call or could not be reached.

    Carries the upstream HTTP status (502 when there was no response).
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'ABDM request failed'

    def __init__(self, message=None, *, status_code=None, details=None):
        super().__init__(message)
        if status_code:
            self.status_code = status_code
        self.details = details if details is not None else {}

    def to_dict(self) -> dict[str, Any]:
        return {'error': 'ABDM API error', 'message': self.message, 'details': self.details}


def mask_payload(payload: dict) -> dict:
    return {key: (MASK if key in MASKED_KEYS and value else value) for key, value in (payload or {}).items()}


def _json_or_empty(response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {'data': data}


class AbdmClient:
    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = (base_url or settings.ABDM_BASE_URL).rstrip('/')
        self.timeout = timeout or settings.ABDM_API_TIMEOUT

    def register_generate_otp(self, aadhaar: str, mobile: str = '', **context) -> dict:
        return self._post(f"{REGISTER_PATH}/generate-otp", {'aadhaar': aadhaar, 'mobile': mobile or None}, **context)

    def register_verify_otp(self, otp: str, txn_id: str, **context) -> dict:
        return self._post(f"{REGISTER_PATH}/verify-otp", {'otp': otp, 'txnId': txn_id}, **context)

    def login_request_otp(self, health_id: str, auth_method: str, **context) -> dict:
        return self._post(f"{LOGIN_PATH}/request-otp", {'healthId': health_id, 'authMethod': auth_method}, **context)

    def login_verify_otp(self, otp: str, txn_id: str, **context) -> dict:
        return self._post(f"{LOGIN_PATH}/verify-otp", {'otp': otp, 'txnId': txn_id}, **context)

    def _post(self, path: str, payload: dict, *, patient_id=None, session_id: str = '') -> dict:
        url = f"{self.base_url}{path}"
        started = time.monotonic()
        log = {
            'endpoint': url,
            'method': 'POST',
            'patient_id': patient_id,
            'session_id': session_id or '',
            'request_body': mask_payload(payload),
        }

        try:
            response = requests.post(
                url,
                json=payload,
                headers={'Content-Type': 'application/json', 'Accept': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            self._record(log, started, error_message=str(exc))
            logger.warning('ABDM call %s failed: %s', url, exc)
            raise AbdmApiError(str(exc)) from exc

        data = _json_or_empty(response)
        if response.status_code >= 400:
            message = data.get('message') or response.reason or 'ABDM request failed'
            self._record(log, started, response_status=response.status_code, response_body=data, error_message=message)
            logger.warning('ABDM call %s returned %s: %s', url, response.status_code, message)
            raise AbdmApiError(message, status_code=response.status_code, details=data)

        self._record(log, started, response_status=response.status_code, response_body=data)
        return data

    @staticmethod
    def _record(log: dict, started: float, *, response_status=None, response_body=None, error_message=''):
        try:
            AbhaApiLog.objects.create(
                response_status=response_status,
                response_body=response_body or {},
                response_time_ms=int((time.monotonic() - started) * 1000),
                error_message=error_message or '',
                **log,
            )
        except Exception:
            logger.exception('Failed to write ABHA API log for %s', log.get('endpoint'))
