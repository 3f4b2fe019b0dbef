from django.contrib.auth import get_user_model

from .models import DoctorAvailability, DoctorTimeSlot
from .services import replace_time_slots, upsert_availability

User = get_user_model()

MORNING = ["09:00", "09:15", "09:30", "09:45", "10:00", "10:30", "11:00", "11:30"]
EVENING = ["17:00", "17:30", "18:00", "18:30"]


def seed_schedules(flush: bool = False) -> dict:
	"""Give every active doctor the standard OPD slots and a Mon-Sat week."""
	stats = {"doctor_time_slots": 0, "doctor_availability": 0}
	for doctor in User.objects.filter(role__name="doctor", is_active=True):
		if not flush and DoctorTimeSlot.objects.filter(doctor=doctor).exists():
			continue
		slots = [{"slot_time": t, "appointment_type": DoctorTimeSlot.TYPE_OFFLINE} for t in MORNING]
		slots += [{"slot_time": t, "appointment_type": DoctorTimeSlot.TYPE_BOTH} for t in EVENING]
		stats["doctor_time_slots"] += len(replace_time_slots(doctor, slots))

		week = [
			{"day_of_week": day, "is_available": day != 0, "start_time": "09:00", "end_time": "19:00"}
			for day in range(7)
		]
		upsert_availability(doctor, week)
		stats["doctor_availability"] += DoctorAvailability.objects.filter(doctor=doctor).count()
	return stats
