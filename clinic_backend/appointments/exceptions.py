"""
Appointment-specific exceptions.

Raised by ``appointments.services`` and rendered by the project exception
handler (see ``core.exceptions``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from clinic_backend.core.exceptions import Conflict, InvalidRequest


@dataclass
class SlotIssue:
	"""Represents one rejected entry of a time-slot payload."""
	index: int
	value: Any
	reason: str

	def to_dict(self) -> dict[str, Any]:
		return {'index': self.index, 'value': self.value, 'reason': self.reason}


class InvalidStatusTransition(InvalidRequest):
	"""Raised when an appointment cannot move from its current status to the requested one."""

	def __init__(self, *, from_status: str, to_status: str, message: str = 'Invalid status transition'):
		self.from_status = from_status
		self.to_status = to_status
		super().__init__(message)

	def to_dict(self) -> dict[str, Any]:
		return {
			'error': self.message,
			'from': self.from_status,
			'to': self.to_status,
		}


class InvalidTimeSlots(InvalidRequest):
	"""Raised when a time-slot payload contains malformed or duplicate entries."""

	def __init__(self, issues: list[SlotIssue], message: str = 'Invalid time slots'):
		self.issues = issues
		super().__init__(message)

	def to_dict(self) -> dict[str, Any]:
		return {
			'error': self.message,
			'issues': [i.to_dict() for i in self.issues],
		}


class DuplicateAppointment(Conflict):
	"""Raised when the patient already holds the same slot with the same doctor."""

	def __init__(self, existing_id: int):
		self.existing_id = existing_id
		super().__init__('Appointment already exists for this patient at the selected time')

	def to_dict(self) -> dict[str, Any]:
		return {'error': self.message, 'existing_appointment_id': self.existing_id}
