"""Appointment booking, visit workflow and doctor schedule management."""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from clinic_backend.billing.services import consume_subscription_session
from clinic_backend.core.exceptions import InvalidRequest, NotFound
from clinic_backend.core.models import User
from clinic_backend.core.utils import format_hhmm, is_hhmm, log_patient_action, minutes_between

from .exceptions import DuplicateAppointment, InvalidStatusTransition, InvalidTimeSlots, SlotIssue
from .models import Appointment, AppointmentStatusHistory, DoctorAvailability, DoctorTimeSlot

logger = logging.getLogger(__name__)

# Booking channel -> arrival type
ARRIVAL_TYPE_MAP = {
	'offline': Appointment.ARRIVAL_WALK_IN,
	'online': Appointment.ARRIVAL_ONLINE,
	'referral': Appointment.ARRIVAL_REFERRAL,
}


def resolve_doctor(doctor_id) -> User:
	doctor = User.objects.filter(pk=doctor_id, role__name='doctor').first() if doctor_id else None
	if doctor is None:
		raise NotFound('Doctor not found')
	return doctor


def _parse_time(value):
	if hasattr(value, 'hour'):
		return value
	return datetime.strptime(str(value)[:5], '%H:%M').time()


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------


def create_appointment(*, patient, doctor=None, appointment_date, appointment_time,
		appointment_type=None, reason_for_visit='', notes='', user=None) -> Appointment:
	arrival_type = ARRIVAL_TYPE_MAP.get((appointment_type or '').lower(), Appointment.ARRIVAL_WALK_IN)

	duplicate = (
		Appointment.objects.filter(
			patient=patient,
			doctor=doctor,
			appointment_date=appointment_date,
			appointment_time=appointment_time,
		)
		.exclude(status__in=Appointment.INACTIVE_STATUSES)
		.first()
	)
	if duplicate is not None:
		raise DuplicateAppointment(duplicate.pk)

	with transaction.atomic():
		appointment = Appointment.objects.create(
			patient=patient,
			doctor=doctor,
			clinic=getattr(doctor, 'clinic', None) or getattr(user, 'clinic', None),
			appointment_date=appointment_date,
			appointment_time=appointment_time,
			arrival_type=arrival_type,
			reason_for_visit=reason_for_visit or '',
			notes=notes or '',
			status=Appointment.STATUS_SCHEDULED,
			created_by=user if getattr(user, 'is_authenticated', False) else None,
		)
		_record_status(appointment, '', Appointment.STATUS_SCHEDULED, user)

	log_patient_action(user, 'appointment_create', patient_id=patient.pk, meta={'appointment_id': appointment.pk})
	return appointment


def _record_status(appointment, from_status, to_status, user, notes=''):
	AppointmentStatusHistory.objects.create(
		appointment=appointment,
		from_status=from_status or '',
		to_status=to_status,
		changed_by=user if getattr(user, 'is_authenticated', False) else None,
		notes=notes or '',
	)


def set_status(appointment: Appointment, new_status: str, *, user=None, notes='') -> Appointment:
	"""Move an appointment to ``new_status`` and record the change.

	Completing a visit stamps ``visit_ended_at`` and consumes one session of
	the patient's active subscription package (if any).
	"""
	valid = {choice for choice, _label in Appointment.STATUS_CHOICES}
	if new_status not in valid:
		raise InvalidRequest(f"Invalid status. Must be one of: {', '.join(sorted(valid))}")

	old_status = appointment.status
	if old_status == new_status:
		return appointment

	now = timezone.now()
	with transaction.atomic():
		appointment.status = new_status
		fields = ['status', 'updated_at']
		if new_status == Appointment.STATUS_CHECKED_IN and appointment.checked_in_at is None:
			appointment.checked_in_at = now
			fields.append('checked_in_at')
		if new_status == Appointment.STATUS_IN_PROGRESS and appointment.visit_started_at is None:
			appointment.visit_started_at = now
			appointment.waiting_time_minutes = minutes_between(appointment.checked_in_at, now) or 0
			fields += ['visit_started_at', 'waiting_time_minutes']
		if new_status == Appointment.STATUS_COMPLETED:
			appointment.visit_ended_at = now
			fields.append('visit_ended_at')
			if appointment.visit_started_at is not None:
				appointment.actual_duration_minutes = minutes_between(appointment.visit_started_at, now)
				fields.append('actual_duration_minutes')
		appointment.save(update_fields=fields)
		_record_status(appointment, old_status, new_status, user, notes)

		if new_status == Appointment.STATUS_COMPLETED:
			consume_subscription_session(
				patient=appointment.patient,
				doctor=appointment.doctor,
				appointment=appointment,
				user=user,
			)

	log_patient_action(
		user,
		'appointment_status_update',
		patient_id=appointment.patient_id,
		meta={'appointment_id': appointment.pk, 'from': old_status, 'to': new_status},
	)
	return appointment


def check_in(appointment: Appointment, *, user=None) -> Appointment:
	if appointment.status != Appointment.STATUS_SCHEDULED:
		raise InvalidStatusTransition(from_status=appointment.status, to_status=Appointment.STATUS_CHECKED_IN)
	return set_status(appointment, Appointment.STATUS_CHECKED_IN, user=user)


def start_visit(appointment: Appointment, *, user=None) -> Appointment:
	if appointment.status not in (Appointment.STATUS_SCHEDULED, Appointment.STATUS_CHECKED_IN):
		raise InvalidStatusTransition(from_status=appointment.status, to_status=Appointment.STATUS_IN_PROGRESS)
	return set_status(appointment, Appointment.STATUS_IN_PROGRESS, user=user)


def end_visit(appointment: Appointment, *, user=None) -> Appointment:
	if appointment.status != Appointment.STATUS_IN_PROGRESS:
		raise InvalidStatusTransition(from_status=appointment.status, to_status=Appointment.STATUS_COMPLETED)
	return set_status(appointment, Appointment.STATUS_COMPLETED, user=user)


def todays_summary(qs) -> dict:
	"""Status counts for today's appointments in ``qs``."""
	today = timezone.localdate()
	counts = qs.filter(appointment_date=today).aggregate(
		total=Count('id'),
		scheduled=Count('id', filter=Q(status=Appointment.STATUS_SCHEDULED)),
		checked_in=Count('id', filter=Q(status=Appointment.STATUS_CHECKED_IN)),
		in_progress=Count('id', filter=Q(status=Appointment.STATUS_IN_PROGRESS)),
		completed=Count('id', filter=Q(status=Appointment.STATUS_COMPLETED)),
		cancelled=Count('id', filter=Q(status=Appointment.STATUS_CANCELLED)),
		no_show=Count('id', filter=Q(status=Appointment.STATUS_NO_SHOW)),
	)
	counts['date'] = today.isoformat()
	return counts


def booked_times(doctor, day) -> list[str]:
	"""HH:MM times already taken for ``doctor`` on ``day`` (cancelled/no-show excluded)."""
	times = (
		Appointment.objects.filter(doctor=doctor, appointment_date=day)
		.exclude(status__in=Appointment.INACTIVE_STATUSES)
		.order_by('appointment_time')
		.values_list('appointment_time', flat=True)
	)
	return sorted({format_hhmm(t) for t in times})


# ---------------------------------------------------------------------------
# Doctor schedule
# ---------------------------------------------------------------------------


def available_time_slots(doctor, *, appointment_type=None, day=None):
	qs = DoctorTimeSlot.objects.filter(doctor=doctor, is_active=True)
	if appointment_type in (DoctorTimeSlot.TYPE_OFFLINE, DoctorTimeSlot.TYPE_ONLINE):
		qs = qs.filter(appointment_type__in=[appointment_type, DoctorTimeSlot.TYPE_BOTH])
	slots = list(qs.order_by('display_order', 'slot_time'))
	if day is not None:
		taken = set(booked_times(doctor, day))
		slots = [s for s in slots if format_hhmm(s.slot_time) not in taken]
	return slots


def _normalize_slot_payload(slots) -> list[dict]:
	if not isinstance(slots, list):
		raise InvalidRequest('Slots must be an array')

	valid_types = {choice for choice, _label in DoctorTimeSlot.TYPE_CHOICES}
	issues: list[SlotIssue] = []
	normalized: list[dict] = []
	seen = set()
	for index, raw in enumerate(slots):
		item = {'slot_time': raw} if isinstance(raw, str) else dict(raw or {})
		slot_time = item.get('slot_time') or item.get('time')
		slot_type = item.get('appointment_type') or DoctorTimeSlot.TYPE_BOTH
		if not is_hhmm(str(slot_time or '')[:5]):
			issues.append(SlotIssue(index, raw, 'slot_time must be HH:MM'))
			continue
		if slot_type not in valid_types:
			issues.append(SlotIssue(index, raw, 'appointment_type must be offline, online or both'))
			continue
		key = (str(slot_time)[:5], slot_type)
		if key in seen:
			issues.append(SlotIssue(index, raw, 'duplicate slot'))
			continue
		seen.add(key)
		normalized.append({
			'slot_time': _parse_time(slot_time),
			'appointment_type': slot_type,
			'is_active': bool(item.get('is_active', True)),
		})
	if issues:
		raise InvalidTimeSlots(issues)
	return normalized


def replace_time_slots(doctor, slots, *, user=None) -> list[DoctorTimeSlot]:
	"""Replace all time slots of ``doctor`` atomically.

	Existing slots are deleted and the new list is inserted with
	``display_order`` = position + 1. Either both happen or neither does.
	"""
	normalized = _normalize_slot_payload(slots)
	with transaction.atomic():
		DoctorTimeSlot.objects.filter(doctor=doctor).delete()
		created = DoctorTimeSlot.objects.bulk_create([
			DoctorTimeSlot(doctor=doctor, display_order=index + 1, **item)
			for index, item in enumerate(normalized)
		])
	logger.info('Replaced time slots for doctor %s (%d slots) by user %s',
		doctor.pk, len(created), getattr(user, 'pk', None))
	return list(DoctorTimeSlot.objects.filter(doctor=doctor).order_by('display_order'))


def add_time_slot(doctor, *, slot_time, appointment_type=None) -> DoctorTimeSlot:
	if not is_hhmm(str(slot_time or '')[:5]) or len(str(slot_time)) != 5:
		raise InvalidRequest('Invalid time format. Use HH:MM')
	slot_type = appointment_type or DoctorTimeSlot.TYPE_BOTH
	if slot_type not in {choice for choice, _label in DoctorTimeSlot.TYPE_CHOICES}:
		raise InvalidRequest('appointment_type must be offline, online or both')

	parsed = _parse_time(slot_time)
	with transaction.atomic():
		if DoctorTimeSlot.objects.filter(doctor=doctor, slot_time=parsed, appointment_type=slot_type).exists():
			raise InvalidRequest('Time slot already exists')
		next_order = (DoctorTimeSlot.objects.filter(doctor=doctor).aggregate(m=Max('display_order'))['m'] or 0) + 1
		return DoctorTimeSlot.objects.create(
			doctor=doctor,
			slot_time=parsed,
			appointment_type=slot_type,
			display_order=next_order,
		)


def upsert_availability(doctor, days) -> list[DoctorAvailability]:
	if not isinstance(days, list):
		raise InvalidRequest('availability must be an array')

	with transaction.atomic():
		for item in days:
			day = item.get('day_of_week')
			if not isinstance(day, int) or not 0 <= day <= 6:
				raise InvalidRequest('day_of_week must be an integer between 0 (Sunday) and 6 (Saturday)')
			start, end = item.get('start_time'), item.get('end_time')
			for value in (start, end):
				if value and not is_hhmm(str(value)[:5]):
					raise InvalidRequest('start_time/end_time must be HH:MM')
			DoctorAvailability.objects.update_or_create(
				doctor=doctor,
				day_of_week=day,
				defaults={
					'is_available': bool(item.get('is_available', True)),
					'start_time': _parse_time(start) if start else None,
					'end_time': _parse_time(end) if end else None,
				},
			)
	return list(DoctorAvailability.objects.filter(doctor=doctor).order_by('day_of_week'))
