"""OPD queue: token assignment, status changes and daily stats."""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from clinic_backend.appointments.models import Appointment
from clinic_backend.appointments.services import set_status as set_appointment_status
from clinic_backend.core.exceptions import InvalidRequest
from clinic_backend.core.utils import log_patient_action, minutes_between

from .models import QueueEntry, QueueTokenCounter

logger = logging.getLogger(__name__)

# Queue status -> appointment status
APPOINTMENT_STATUS_SYNC = {
    QueueEntry.STATUS_WAITING: Appointment.STATUS_CHECKED_IN,
    QueueEntry.STATUS_IN_PROGRESS: Appointment.STATUS_IN_PROGRESS,
    QueueEntry.STATUS_COMPLETED: Appointment.STATUS_COMPLETED,
    QueueEntry.STATUS_CANCELLED: Appointment.STATUS_CANCELLED,
    QueueEntry.STATUS_NO_SHOW: Appointment.STATUS_NO_SHOW,
}

BP_SYSTOLIC_RANGE = (90, 140)
BP_DIASTOLIC_RANGE = (60, 90)


def is_bp_abnormal(systolic, diastolic) -> bool:
    """True when systolic is outside 90-140 or diastolic outside 60-90."""
    if systolic is not None and not BP_SYSTOLIC_RANGE[0] <= systolic <= BP_SYSTOLIC_RANGE[1]:
        return True
    if diastolic is not None and not BP_DIASTOLIC_RANGE[0] <= diastolic <= BP_DIASTOLIC_RANGE[1]:
        return True
    return False


def todays_entries(doctor_id=None):
    qs = QueueEntry.objects.filter(queue_date=timezone.localdate()).select_related('patient', 'doctor')
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    return qs.order_by('-priority', 'token_number', 'id')


def next_token(day) -> int:
    """Reserve the next token of ``day``. Must run inside a transaction.

    The counter row is locked, so concurrent check-ins queue up behind it.
    The day's highest stored token is re-read under that lock in case
    entries were written without going through the counter.
    """
    counter, _created = QueueTokenCounter.objects.get_or_create(queue_date=day)
    counter = QueueTokenCounter.objects.select_for_update().get(pk=counter.pk)
    highest = QueueEntry.objects.filter(queue_date=day).aggregate(top=Max('token_number'))['top'] or 0
    counter.last_token = max(counter.last_token, highest) + 1
    counter.save(update_fields=['last_token'])
    return counter.last_token


def add_to_queue(*, patient, doctor=None, appointment=None, priority=None,
                 chief_complaint='', notes='', user=None) -> QueueEntry:
    """Put ``patient`` in today's queue and hand out the next token of the day."""
    today = timezone.localdate()
    active = QueueEntry.objects.filter(
        patient=patient,
        queue_date=today,
        status__in=QueueEntry.ACTIVE_STATUSES,
    ).first()
    if active is not None:
        raise InvalidRequest('Patient already in queue today', queue_id=active.pk)

    if not priority:
        priority = patient.priority or 0

    with transaction.atomic():
        token = next_token(today)
        entry = QueueEntry.objects.create(
            patient=patient,
            doctor=doctor,
            appointment=appointment,
            clinic=getattr(doctor, 'clinic', None) or getattr(user, 'clinic', None),
            queue_date=today,
            token_number=token,
            priority=priority,
            chief_complaint=chief_complaint or '',
            notes=notes or '',
            status=QueueEntry.STATUS_WAITING,
            created_by=user if getattr(user, 'is_authenticated', False) else None,
        )
        if appointment is not None and appointment.status == Appointment.STATUS_SCHEDULED:
            set_appointment_status(appointment, Appointment.STATUS_CHECKED_IN, user=user)

    logger.info('Queued patient %s with token %s (doctor=%s)', patient.pk, entry.token_number, getattr(doctor, 'pk', None))
    log_patient_action(user, 'queue_add', patient_id=patient.pk, meta={'queue_id': entry.pk, 'token': entry.token_number})
    return entry


def update_queue_status(entry: QueueEntry, new_status: str, *, skip_billing=None, user=None) -> QueueEntry:
    """Move ``entry`` to ``new_status``.

    ``visit_status`` only changes when ``skip_billing`` is given explicitly
    and the entry is not billed yet.
    """
    valid = [choice for choice, _label in QueueEntry.STATUS_CHOICES]
    if new_status not in valid:
        raise InvalidRequest(f"Invalid status. Must be one of: {', '.join(valid)}")

    now = timezone.now()
    with transaction.atomic():
        entry.status = new_status
        if new_status == QueueEntry.STATUS_IN_PROGRESS and entry.called_at is None:
            entry.called_at = now
        if new_status == QueueEntry.STATUS_COMPLETED:
            entry.completed_at = now
        if skip_billing is not None and entry.visit_status != QueueEntry.VISIT_BILLED:
            entry.visit_status = QueueEntry.VISIT_WITH_STAFF if skip_billing else QueueEntry.VISIT_UNBILLED
        entry.save(update_fields=['status', 'called_at', 'completed_at', 'visit_status'])

        if entry.appointment_id:
            set_appointment_status(entry.appointment, APPOINTMENT_STATUS_SYNC[new_status], user=user)

    log_patient_action(
        user,
        'queue_status_update',
        patient_id=entry.patient_id,
        meta={'queue_id': entry.pk, 'status': new_status},
    )
    return entry


def complete_active_entry(patient, *, user=None):
    """Complete the patient's waiting/in-progress entry of today, if any."""
    entry = QueueEntry.objects.filter(
        patient=patient,
        queue_date=timezone.localdate(),
        status__in=QueueEntry.ACTIVE_STATUSES,
    ).order_by('-id').first()
    if entry is None:
        return None
    return update_queue_status(entry, QueueEntry.STATUS_COMPLETED, user=user)


def queue_stats(doctor_id=None) -> dict:
    qs = QueueEntry.objects.filter(queue_date=timezone.localdate())
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)

    counts = qs.aggregate(
        today_total=Count('id'),
        waiting=Count('id', filter=Q(status=QueueEntry.STATUS_WAITING)),
        in_progress=Count('id', filter=Q(status=QueueEntry.STATUS_IN_PROGRESS)),
        completed=Count('id', filter=Q(status=QueueEntry.STATUS_COMPLETED)),
    )

    waits = [
        minutes_between(checked_in, done)
        for checked_in, done in qs.filter(
            status=QueueEntry.STATUS_COMPLETED,
            completed_at__isnull=False,
        ).values_list('check_in_time', 'completed_at')
    ]
    counts['avg_wait_time'] = round(sum(waits) / len(waits)) if waits else 0
    return counts


def wait_minutes(entry: QueueEntry, now=None) -> int:
    """Minutes the patient has waited: until called, or until now."""
    end = entry.called_at or entry.completed_at or now or timezone.now()
    return minutes_between(entry.check_in_time, end) or 0
