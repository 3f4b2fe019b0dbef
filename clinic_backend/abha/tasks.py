import logging

from celery import shared_task

from .services import expire_stale_sessions

logger = logging.getLogger(__name__)


@shared_task(name="clinic_backend.abha.tasks.expire_abha_sessions")
def expire_abha_sessions() -> int:
    """Periodic cleanup of ABHA OTP sessions nobody finished."""
    return expire_stale_sessions()
