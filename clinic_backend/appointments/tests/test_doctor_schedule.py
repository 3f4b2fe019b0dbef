"""Tests for doctor time slots and weekly availability.

Covers the atomic replace of all slots, single-slot add/delete,
type filtering, booked-time removal and RBAC for doctors.
"""

from __future__ import annotations

from datetime import time, timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient

from clinic_backend.appointments.models import Appointment, DoctorAvailability, DoctorTimeSlot
from clinic_backend.core.models import Role, User
from clinic_backend.patients.models import Patient


class DoctorTimeSlotTest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.role_admin, _ = Role.objects.using("default").get_or_create(
            name="admin", defaults={"label": "Administrator"}
        )
        self.role_doctor, _ = Role.objects.using("default").get_or_create(
            name="doctor", defaults={"label": "Doctor"}
        )
        self.admin = User.objects.db_manager("default").create_user(
            username="admin_slots", email="admin_slots@example.com", password="DummyPass123!", role=self.role_admin
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_slots", email="doctor_slots@example.com", password="DummyPass123!", role=self.role_doctor
        )
        self.doctor2 = User.objects.db_manager("default").create_user(
            username="doctor2_slots", email="doctor2_slots@example.com", password="DummyPass123!",
            role=self.role_doctor,
        )
        self.url = f"/api/doctors/{self.doctor.id}/time-slots/"

        DoctorTimeSlot.objects.create(doctor=self.doctor, slot_time=time(9, 0), appointment_type="offline", display_order=1)
        DoctorTimeSlot.objects.create(doctor=self.doctor, slot_time=time(9, 30), appointment_type="online", display_order=2)
        DoctorTimeSlot.objects.create(doctor=self.doctor, slot_time=time(10, 0), appointment_type="both", display_order=3)

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def test_list_active_slots(self):
        DoctorTimeSlot.objects.create(doctor=self.doctor, slot_time=time(11, 0), is_active=False, display_order=4)
        r = self._client_for(self.admin).get(self.url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([s["slot_time"] for s in r.data], ["09:00", "09:30", "10:00"])

    def test_filter_by_type_includes_both(self):
        r = self._client_for(self.admin).get(self.url, {"appointment_type": "offline"})
        self.assertEqual([s["slot_time"] for s in r.data], ["09:00", "10:00"])

    def test_date_removes_booked_times(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        patient = Patient.objects.create(uhid="P200", name="Ravi")
        Appointment.objects.create(
            patient=patient, doctor=self.doctor, appointment_date=tomorrow, appointment_time=time(9, 30)
        )
        r = self._client_for(self.admin).get(self.url, {"date": tomorrow.isoformat()})
        self.assertEqual([s["slot_time"] for s in r.data], ["09:00", "10:00"])

    def test_unknown_doctor_returns_404(self):
        r = self._client_for(self.admin).get("/api/doctors/999999/time-slots/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    # ------------------------------------------------------------------
    # Replace all slots
    # ------------------------------------------------------------------

    def test_replace_slots(self):
        payload = {"slots": [
            {"slot_time": "14:00", "appointment_type": "offline"},
            {"slot_time": "14:30"},
            "15:00",
        ]}
        r = self._client_for(self.admin).put(self.url, payload, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data["success"])

        slots = list(DoctorTimeSlot.objects.filter(doctor=self.doctor).order_by("display_order"))
        self.assertEqual([s.slot_time for s in slots], [time(14, 0), time(14, 30), time(15, 0)])
        self.assertEqual([s.display_order for s in slots], [1, 2, 3])
        self.assertEqual(slots[1].appointment_type, "both")

    def test_replace_with_empty_list_clears_slots(self):
        r = self._client_for(self.admin).put(self.url, {"slots": []}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(DoctorTimeSlot.objects.filter(doctor=self.doctor).exists())

    def test_replace_requires_list(self):
        r = self._client_for(self.admin).put(self.url, {"slots": "09:00"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Slots must be an array")
        self.assertEqual(DoctorTimeSlot.objects.filter(doctor=self.doctor).count(), 3)

    def test_replace_reports_invalid_entries_and_keeps_old_slots(self):
        payload = {"slots": ["08:00", "8 am", "08:00"]}
        r = self._client_for(self.admin).put(self.url, payload, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual([i["index"] for i in r.data["issues"]], [1, 2])
        self.assertEqual(DoctorTimeSlot.objects.filter(doctor=self.doctor).count(), 3)

    def test_replace_is_atomic_when_insert_fails(self):
        with patch.object(DoctorTimeSlot.objects, "bulk_create", side_effect=RuntimeError("disk full")):
            r = self._client_for(self.admin).put(self.url, {"slots": ["16:00"]}, format="json")
        self.assertEqual(r.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(r.data["error"], "Internal server error")
        # The delete was rolled back together with the failed insert.
        self.assertEqual(DoctorTimeSlot.objects.filter(doctor=self.doctor).count(), 3)

    def test_doctor_can_replace_own_slots_only(self):
        client = self._client_for(self.doctor2)
        r = client.put(self.url, {"slots": ["12:00"]}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

        r = client.put(f"/api/doctors/{self.doctor2.id}/time-slots/", {"slots": ["12:00"]}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)

    # ------------------------------------------------------------------
    # Single slot
    # ------------------------------------------------------------------

    def test_add_slot_uses_next_display_order(self):
        r = self._client_for(self.admin).post(
            f"/api/doctors/{self.doctor.id}/time-slots/add/", {"slot_time": "11:15"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["slot_time"], "11:15")
        self.assertEqual(r.data["display_order"], 4)
        self.assertEqual(r.data["appointment_type"], "both")

    def test_add_slot_rejects_bad_format(self):
        r = self._client_for(self.admin).post(
            f"/api/doctors/{self.doctor.id}/time-slots/add/", {"slot_time": "9:00"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Invalid time format. Use HH:MM")

    def test_add_duplicate_slot_returns_400(self):
        r = self._client_for(self.admin).post(
            f"/api/doctors/{self.doctor.id}/time-slots/add/",
            {"slot_time": "10:00", "appointment_type": "both"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Time slot already exists")

    def test_delete_slot(self):
        slot = DoctorTimeSlot.objects.filter(doctor=self.doctor).first()
        r = self._client_for(self.admin).delete(f"/api/time-slots/{slot.id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(DoctorTimeSlot.objects.filter(id=slot.id).exists())

    def test_delete_missing_slot_returns_404(self):
        r = self._client_for(self.admin).delete("/api/time-slots/999999/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_doctor_cannot_delete_foreign_slot(self):
        slot = DoctorTimeSlot.objects.filter(doctor=self.doctor).first()
        r = self._client_for(self.doctor2).delete(f"/api/time-slots/{slot.id}/")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)


class DoctorAvailabilityTest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.role_admin, _ = Role.objects.using("default").get_or_create(
            name="admin", defaults={"label": "Administrator"}
        )
        self.role_doctor, _ = Role.objects.using("default").get_or_create(
            name="doctor", defaults={"label": "Doctor"}
        )
        self.admin = User.objects.db_manager("default").create_user(
            username="admin_avail", email="admin_avail@example.com", password="DummyPass123!", role=self.role_admin
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_avail", email="doctor_avail@example.com", password="DummyPass123!",
            role=self.role_doctor,
        )
        self.url = f"/api/doctors/{self.doctor.id}/availability/"
        self.client = APIClient()
        self.client.defaults["HTTP_HOST"] = "localhost"
        self.client.force_authenticate(user=self.admin)

    def test_upsert_week(self):
        payload = {"availability": [
            {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"},
            {"day_of_week": 0, "is_available": False},
        ]}
        r = self.client.put(self.url, payload, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([d["day_name"] for d in r.data], ["Sunday", "Monday"])
        self.assertEqual(r.data[1]["start_time"], "09:00")

        payload = {"availability": [{"day_of_week": 1, "start_time": "10:00", "end_time": "14:00"}]}
        self.client.put(self.url, payload, format="json")
        monday = DoctorAvailability.objects.get(doctor=self.doctor, day_of_week=1)
        self.assertEqual(monday.start_time, time(10, 0))
        self.assertEqual(DoctorAvailability.objects.filter(doctor=self.doctor).count(), 2)

    def test_invalid_day_rejected(self):
        r = self.client.put(self.url, {"availability": [{"day_of_week": 7}]}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DoctorAvailability.objects.exists())

    def test_list_availability(self):
        DoctorAvailability.objects.create(doctor=self.doctor, day_of_week=3)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data[0]["day_name"], "Wednesday")
