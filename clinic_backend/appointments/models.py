"""Appointments, status history and doctor scheduling (time slots, weekly availability).

Appointments reference ``patients.Patient`` directly; the queue, billing and
prescription apps hang off ``Appointment``.
"""

from django.conf import settings
from django.db import models


class Appointment(models.Model):
	"""A booked visit of a patient with a doctor on a given date and time.

	Lifecycle:
	scheduled -> checked-in -> in-progress -> completed
	(cancelled / no-show may happen from any non-final state)
	"""
	STATUS_SCHEDULED = "scheduled"
	STATUS_CHECKED_IN = "checked-in"
	STATUS_IN_PROGRESS = "in-progress"
	STATUS_COMPLETED = "completed"
	STATUS_CANCELLED = "cancelled"
	STATUS_NO_SHOW = "no-show"

	STATUS_CHOICES = (
		(STATUS_SCHEDULED, STATUS_SCHEDULED),
		(STATUS_CHECKED_IN, STATUS_CHECKED_IN),
		(STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
		(STATUS_COMPLETED, STATUS_COMPLETED),
		(STATUS_CANCELLED, STATUS_CANCELLED),
		(STATUS_NO_SHOW, STATUS_NO_SHOW),
	)

	INACTIVE_STATUSES = (STATUS_CANCELLED, STATUS_NO_SHOW)
	FINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW)

	ARRIVAL_WALK_IN = "walk-in"
	ARRIVAL_ONLINE = "online"
	ARRIVAL_REFERRAL = "referral"

	ARRIVAL_CHOICES = (
		(ARRIVAL_WALK_IN, ARRIVAL_WALK_IN),
		(ARRIVAL_ONLINE, ARRIVAL_ONLINE),
		(ARRIVAL_REFERRAL, ARRIVAL_REFERRAL),
	)

	PAYMENT_PENDING = "pending"
	PAYMENT_PARTIAL = "partial"
	PAYMENT_PAID = "paid"

	PAYMENT_CHOICES = (
		(PAYMENT_PENDING, PAYMENT_PENDING),
		(PAYMENT_PARTIAL, PAYMENT_PARTIAL),
		(PAYMENT_PAID, PAYMENT_PAID),
	)

	patient = models.ForeignKey(
		"patients.Patient",
		on_delete=models.CASCADE,
		related_name="appointments",
	)
	doctor = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name="appointments",
	)
	clinic = models.ForeignKey(
		"core.Clinic",
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name="appointments",
	)
	appointment_date = models.DateField(db_index=True)
	appointment_time = models.TimeField()
	arrival_type = models.CharField(max_length=16, choices=ARRIVAL_CHOICES, default=ARRIVAL_WALK_IN)
	reason_for_visit = models.TextField(blank=True, default="")
	notes = models.TextField(blank=True, default="")
	status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
	payment_status = models.CharField(max_length=16, choices=PAYMENT_CHOICES, default=PAYMENT_PENDING)

	checked_in_at = models.DateTimeField(null=True, blank=True)
	visit_started_at = models.DateTimeField(null=True, blank=True)
	visit_ended_at = models.DateTimeField(null=True, blank=True)
	waiting_time_minutes = models.PositiveIntegerField(null=True, blank=True)
	actual_duration_minutes = models.PositiveIntegerField(null=True, blank=True)

	created_by = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name="created_appointments",
	)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["appointment_date", "appointment_time", "id"]
		indexes = [
			models.Index(fields=["doctor", "appointment_date"], name="appt_doctor_date_idx"),
		]

	def __str__(self) -> str:
		return f"Appointment #{self.id} patient_id={self.patient_id} {self.appointment_date} {self.appointment_time}"


class AppointmentStatusHistory(models.Model):
	appointment = models.ForeignKey(
		Appointment,
		on_delete=models.CASCADE,
		related_name="status_history",
	)
	from_status = models.CharField(max_length=16, blank=True, default="")
	to_status = models.CharField(max_length=16)
	changed_by = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name="+",
	)
	notes = models.TextField(blank=True, default="")
	changed_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ["changed_at", "id"]
		verbose_name_plural = "Appointment status history"

	def __str__(self) -> str:
		return f"#{self.appointment_id}: {self.from_status} -> {self.to_status}"


class DoctorTimeSlot(models.Model):
	"""Bookable time of day offered by a doctor.

	``appointment_type`` ``both`` means the slot is offered for offline and
	online bookings.
	"""
	TYPE_OFFLINE = "offline"
	TYPE_ONLINE = "online"
	TYPE_BOTH = "both"

	TYPE_CHOICES = (
		(TYPE_OFFLINE, TYPE_OFFLINE),
		(TYPE_ONLINE, TYPE_ONLINE),
		(TYPE_BOTH, TYPE_BOTH),
	)

	doctor = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.CASCADE,
		related_name="time_slots",
	)
	slot_time = models.TimeField()
	appointment_type = models.CharField(max_length=8, choices=TYPE_CHOICES, default=TYPE_BOTH)
	is_active = models.BooleanField(default=True)
	display_order = models.PositiveIntegerField(default=0)
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ["doctor_id", "display_order", "slot_time", "id"]
		constraints = [
			models.UniqueConstraint(
				fields=["doctor", "slot_time", "appointment_type"],
				name="uniq_doctor_slot_time_type",
			),
		]

	def __str__(self) -> str:
		return f"DoctorTimeSlot doctor_id={self.doctor_id} {self.slot_time} ({self.appointment_type})"


class DoctorAvailability(models.Model):
	"""Weekly working day of a doctor. ``day_of_week``: 0=Sunday ... 6=Saturday."""
	DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

	doctor = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.CASCADE,
		related_name="availability",
	)
	day_of_week = models.PositiveSmallIntegerField()
	is_available = models.BooleanField(default=True)
	start_time = models.TimeField(null=True, blank=True)
	end_time = models.TimeField(null=True, blank=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["doctor_id", "day_of_week"]
		verbose_name_plural = "Doctor availability"
		constraints = [
			models.UniqueConstraint(fields=["doctor", "day_of_week"], name="uniq_doctor_day_of_week"),
		]

	def __str__(self) -> str:
		return f"DoctorAvailability doctor_id={self.doctor_id} {self.DAY_NAMES[self.day_of_week % 7]}"
