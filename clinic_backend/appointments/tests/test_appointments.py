"""Tests for appointment endpoints.

Tests cover:
- List with filters and doctor scoping
- Create (404 patient/doctor, arrival type mapping, 409 duplicates)
- Status update + history, check-in / start / end workflow
- Today's summary and booked slots
"""

from __future__ import annotations

from datetime import time, timedelta

from django.test import TestCase
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient

from clinic_backend.appointments.models import Appointment, AppointmentStatusHistory
from clinic_backend.core.models import AuditLog, Role, User
from clinic_backend.patients.models import Patient


class AppointmentAPITest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.role_admin, _ = Role.objects.using("default").get_or_create(
            name="admin", defaults={"label": "Administrator"}
        )
        self.role_doctor, _ = Role.objects.using("default").get_or_create(
            name="doctor", defaults={"label": "Doctor"}
        )
        self.role_billing, _ = Role.objects.using("default").get_or_create(
            name="billing", defaults={"label": "Billing"}
        )
        self.role_reception, _ = Role.objects.using("default").get_or_create(
            name="reception", defaults={"label": "Reception"}
        )

        self.admin = User.objects.db_manager("default").create_user(
            username="admin_appt", email="admin_appt@example.com", password="DummyPass123!", role=self.role_admin
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_appt", email="doctor_appt@example.com", password="DummyPass123!", role=self.role_doctor
        )
        self.doctor2 = User.objects.db_manager("default").create_user(
            username="doctor2_appt", email="doctor2_appt@example.com", password="DummyPass123!", role=self.role_doctor
        )
        self.billing = User.objects.db_manager("default").create_user(
            username="billing_appt", email="billing_appt@example.com", password="DummyPass123!", role=self.role_billing
        )
        self.reception = User.objects.db_manager("default").create_user(
            username="reception_appt", email="reception_appt@example.com", password="DummyPass123!",
            role=self.role_reception,
        )

        self.patient = Patient.objects.create(uhid="P100", name="Asha Rao", gender="F")
        self.today = timezone.localdate()
        self.tomorrow = self.today + timedelta(days=1)

        self.appointment = Appointment.objects.create(
            patient=self.patient,
            doctor=self.doctor,
            appointment_date=self.tomorrow,
            appointment_time=time(10, 0),
        )
        self.other_appointment = Appointment.objects.create(
            patient=self.patient,
            doctor=self.doctor2,
            appointment_date=self.tomorrow,
            appointment_time=time(11, 0),
        )

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def _payload(self, **overrides):
        data = {
            "patient_id": self.patient.id,
            "doctor_id": self.doctor.id,
            "appointment_date": self.tomorrow.isoformat(),
            "appointment_time": "12:30",
        }
        data.update(overrides)
        return data

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def test_list_requires_authentication(self):
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        r = client.get("/api/appointments/")
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_admin_sees_all_appointments(self):
        r = self._client_for(self.admin).get("/api/appointments/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(len(r.data), 2)

    def test_doctor_sees_only_own_appointments(self):
        r = self._client_for(self.doctor).get("/api/appointments/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([a["id"] for a in r.data], [self.appointment.id])

    def test_list_filters_by_doctor_and_status(self):
        self.other_appointment.status = Appointment.STATUS_CANCELLED
        self.other_appointment.save()
        client = self._client_for(self.admin)

        r = client.get("/api/appointments/", {"doctor_id": self.doctor2.id})
        self.assertEqual([a["id"] for a in r.data], [self.other_appointment.id])

        r = client.get("/api/appointments/", {"status": "scheduled"})
        self.assertEqual([a["id"] for a in r.data], [self.appointment.id])

    def test_list_rejects_malformed_date(self):
        r = self._client_for(self.admin).get("/api/appointments/", {"date": "19-10-2026"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("error", r.data)

    def test_list_writes_audit_log(self):
        self._client_for(self.admin).get("/api/appointments/")
        self.assertTrue(AuditLog.objects.filter(action="appointment_list").exists())

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def test_create_appointment(self):
        r = self._client_for(self.reception).post("/api/appointments/", self._payload(), format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["status"], "scheduled")
        self.assertEqual(r.data["arrival_type"], "walk-in")
        self.assertEqual(r.data["appointment_time"], "12:30")

        appt = Appointment.objects.get(id=r.data["id"])
        self.assertEqual(appt.status_history.count(), 1)

    def test_create_maps_online_type(self):
        r = self._client_for(self.admin).post(
            "/api/appointments/", self._payload(appointment_type="online"), format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["arrival_type"], "online")

    def test_create_unknown_patient_returns_404(self):
        r = self._client_for(self.admin).post(
            "/api/appointments/", self._payload(patient_id=999999), format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data["error"], "Patient not found")

    def test_create_with_non_doctor_returns_404(self):
        r = self._client_for(self.admin).post(
            "/api/appointments/", self._payload(doctor_id=self.billing.id), format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data["error"], "Doctor not found")

    def test_create_missing_fields_returns_400(self):
        r = self._client_for(self.admin).post("/api/appointments/", {"patient_id": self.patient.id}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("appointment_date", r.data)

    def test_create_duplicate_returns_409(self):
        r = self._client_for(self.admin).post(
            "/api/appointments/", self._payload(appointment_time="10:00"), format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data["existing_appointment_id"], self.appointment.id)

    def test_cancelled_slot_can_be_rebooked(self):
        self.appointment.status = Appointment.STATUS_CANCELLED
        self.appointment.save()
        r = self._client_for(self.admin).post(
            "/api/appointments/", self._payload(appointment_time="10:00"), format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)

    def test_billing_cannot_create(self):
        r = self._client_for(self.billing).post("/api/appointments/", self._payload(), format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_doctor_without_doctor_id_books_for_self(self):
        payload = self._payload()
        payload.pop("doctor_id")
        r = self._client_for(self.doctor).post("/api/appointments/", payload, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["doctor"], self.doctor.id)

    # ------------------------------------------------------------------
    # Detail
    # ------------------------------------------------------------------

    def test_doctor_cannot_read_foreign_appointment(self):
        r = self._client_for(self.doctor).get(f"/api/appointments/{self.other_appointment.id}/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_updates_reason(self):
        r = self._client_for(self.admin).patch(
            f"/api/appointments/{self.appointment.id}/", {"reason_for_visit": "Fever"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.reason_for_visit, "Fever")

    def test_delete_appointment(self):
        r = self._client_for(self.admin).delete(f"/api/appointments/{self.appointment.id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data["success"])
        self.assertFalse(Appointment.objects.filter(id=self.appointment.id).exists())

    # ------------------------------------------------------------------
    # Status workflow
    # ------------------------------------------------------------------

    def test_status_update_records_history(self):
        r = self._client_for(self.admin).patch(
            f"/api/appointments/{self.appointment.id}/status/", {"status": "no-show"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["status"], "no-show")
        history = AppointmentStatusHistory.objects.filter(appointment=self.appointment).last()
        self.assertEqual(history.from_status, "scheduled")
        self.assertEqual(history.to_status, "no-show")
        self.assertEqual(history.changed_by, self.admin)

    def test_status_update_rejects_unknown_status(self):
        r = self._client_for(self.admin).patch(
            f"/api/appointments/{self.appointment.id}/status/", {"status": "lost"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_completed_status_sets_visit_end(self):
        self._client_for(self.admin).patch(
            f"/api/appointments/{self.appointment.id}/status/", {"status": "completed"}, format="json"
        )
        self.appointment.refresh_from_db()
        self.assertIsNotNone(self.appointment.visit_ended_at)

    def test_check_in_start_end_workflow(self):
        client = self._client_for(self.doctor)
        base = f"/api/appointments/{self.appointment.id}"

        r = client.post(f"{base}/check-in/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["status"], "checked-in")

        Appointment.objects.filter(id=self.appointment.id).update(
            checked_in_at=timezone.now() - timedelta(minutes=20)
        )
        r = client.post(f"{base}/start/")
        self.assertEqual(r.data["status"], "in-progress")
        self.assertGreaterEqual(r.data["waiting_time_minutes"], 19)

        Appointment.objects.filter(id=self.appointment.id).update(
            visit_started_at=timezone.now() - timedelta(minutes=15)
        )
        r = client.post(f"{base}/end/")
        self.assertEqual(r.data["status"], "completed")
        self.assertGreaterEqual(r.data["actual_duration_minutes"], 14)

    def test_end_visit_requires_in_progress(self):
        r = self._client_for(self.admin).post(f"/api/appointments/{self.appointment.id}/end/")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["from"], "scheduled")
        self.assertEqual(r.data["to"], "completed")

    # ------------------------------------------------------------------
    # Summary / booked slots
    # ------------------------------------------------------------------

    def test_today_summary_counts(self):
        Appointment.objects.create(
            patient=self.patient, doctor=self.doctor, appointment_date=self.today, appointment_time=time(9, 0)
        )
        Appointment.objects.create(
            patient=self.patient,
            doctor=self.doctor,
            appointment_date=self.today,
            appointment_time=time(9, 30),
            status=Appointment.STATUS_COMPLETED,
        )
        r = self._client_for(self.admin).get("/api/appointments/today-summary/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["total"], 2)
        self.assertEqual(r.data["scheduled"], 1)
        self.assertEqual(r.data["completed"], 1)
        self.assertEqual(r.data["no_show"], 0)

    def test_booked_slots(self):
        Appointment.objects.create(
            patient=self.patient,
            doctor=self.doctor,
            appointment_date=self.tomorrow,
            appointment_time=time(10, 30),
            status=Appointment.STATUS_CANCELLED,
        )
        r = self._client_for(self.reception).get(
            "/api/appointments/booked-slots/",
            {"doctor_id": self.doctor.id, "date": self.tomorrow.isoformat()},
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data, {"booked_slots": ["10:00"], "count": 1})

    def test_booked_slots_requires_params(self):
        r = self._client_for(self.reception).get("/api/appointments/booked-slots/", {"doctor_id": self.doctor.id})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "doctor_id and date are required")
