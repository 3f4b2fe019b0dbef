from rest_framework.permissions import SAFE_METHODS

from clinic_backend.core.permissions import ALL_STAFF_ROLES, FRONT_DESK_ROLES, RBACPermission


class AppointmentPermission(RBACPermission):
	"""RBAC for appointments.

	- admin / assistant / reception / nurse: everything
	- doctor: only own appointments (read/write)
	- billing: read only
	"""

	read_roles = ALL_STAFF_ROLES
	write_roles = FRONT_DESK_ROLES
	doctor_field = 'doctor_id'


class DoctorSchedulePermission(RBACPermission):
	"""RBAC for doctor time slots and weekly availability.

	Everyone on staff may read a doctor's schedule (booking needs it).
	Writes: admin / assistant / reception, and doctors for their own schedule.
	"""

	read_roles = ALL_STAFF_ROLES
	write_roles = {'admin', 'assistant', 'reception', 'doctor'}

	def has_permission(self, request, view):
		if not super().has_permission(request, view):
			return False
		if request.method in SAFE_METHODS or self._role_name(request) != 'doctor':
			return True
		doctor_id = view.kwargs.get('doctor_id')
		return doctor_id is None or int(doctor_id) == request.user.id


class DoctorTimeSlotPermission(DoctorSchedulePermission):
	"""Single-slot endpoints: doctors may only delete their own slots."""

	doctor_field = 'doctor_id'
