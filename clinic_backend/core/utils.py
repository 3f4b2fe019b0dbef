import logging
import re

from django.utils import timezone

from .models import AuditLog

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')


def log_patient_action(user, action, patient_id=None, meta=None):
    """Write a patient-access action to the audit log.

    Audit failures are logged and swallowed so they never break the request.
    """

    role_name = ''
    role = getattr(user, 'role', None)
    if role is not None:
        role_name = getattr(role, 'name', '') or ''

    try:
        AuditLog.objects.create(
            user=user if getattr(user, 'is_authenticated', False) else None,
            role_name=role_name,
            action=action,
            patient_id=patient_id,
            meta=meta,
        )
    except Exception:
        logger.exception('AuditLog write failed (action=%s, patient_id=%s)', action, patient_id)


def is_hhmm(value) -> bool:
    return bool(value) and bool(_TIME_RE.match(str(value)))


def format_hhmm(value) -> str:
    """Render a ``datetime.time`` (or 'HH:MM[:SS]' string) as 'HH:MM'."""
    if value is None:
        return ''
    if hasattr(value, 'strftime'):
        return value.strftime('%H:%M')
    return str(value)[:5]


def minutes_between(start, end) -> int | None:
    if start is None or end is None:
        return None
    return max(0, int((end - start).total_seconds() // 60))


def today():
    return timezone.localdate()
