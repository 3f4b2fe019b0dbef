"""Tests for the OPD queue.

Covers token numbering (one sequence per day), duplicate check-in,
status changes with appointment sync, stats and the BP alert helper.
"""

from __future__ import annotations

from datetime import time, timedelta

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient

from clinic_backend.appointments.models import Appointment
from clinic_backend.core.models import Role, User
from clinic_backend.opd_queue.models import QueueEntry, QueueTokenCounter
from clinic_backend.opd_queue.services import is_bp_abnormal, next_token, queue_stats, update_queue_status
from clinic_backend.patients.models import Patient, Vitals


class QueueAPITest(TestCase):
    databases = {"default"}

    def setUp(self):
        self.role_reception, _ = Role.objects.using("default").get_or_create(
            name="reception", defaults={"label": "Reception"}
        )
        self.role_doctor, _ = Role.objects.using("default").get_or_create(
            name="doctor", defaults={"label": "Doctor"}
        )
        self.role_billing, _ = Role.objects.using("default").get_or_create(
            name="billing", defaults={"label": "Billing"}
        )
        self.reception = User.objects.db_manager("default").create_user(
            username="reception_q", email="reception_q@example.com", password="DummyPass123!",
            role=self.role_reception,
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_q", email="doctor_q@example.com", password="DummyPass123!", role=self.role_doctor
        )
        self.doctor2 = User.objects.db_manager("default").create_user(
            username="doctor2_q", email="doctor2_q@example.com", password="DummyPass123!", role=self.role_doctor
        )
        self.billing = User.objects.db_manager("default").create_user(
            username="billing_q", email="billing_q@example.com", password="DummyPass123!", role=self.role_billing
        )

        self.p1 = Patient.objects.create(uhid="PQ1", name="Anil", priority=2)
        self.p2 = Patient.objects.create(uhid="PQ2", name="Bina", is_vip=True, vip_tier="gold")
        self.p3 = Patient.objects.create(uhid="PQ3", name="Chitra")

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def _add(self, patient, doctor=None, **extra):
        payload = {"patient_id": patient.id}
        if doctor is not None:
            payload["doctor_id"] = doctor.id
        payload.update(extra)
        return self._client_for(self.reception).post("/api/queue/", payload, format="json")

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    def test_tokens_are_one_daily_sequence_across_doctors(self):
        r1 = self._add(self.p1, self.doctor)
        r2 = self._add(self.p2, self.doctor2)
        r3 = self._add(self.p3)
        self.assertEqual(r1.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r1.data["token_number"], 1)
        self.assertEqual(r2.data["token_number"], 2)
        self.assertEqual(r3.data["token_number"], 3)
        self.assertEqual(QueueTokenCounter.objects.get(queue_date=timezone.localdate()).last_token, 3)
        self.assertTrue(r1.data["success"])

    def test_tokens_restart_each_day(self):
        QueueEntry.objects.create(
            patient=self.p3,
            doctor=self.doctor,
            queue_date=timezone.localdate() - timedelta(days=1),
            token_number=7,
        )
        r = self._add(self.p1, self.doctor)
        self.assertEqual(r.data["token_number"], 1)

    def test_stale_counter_skips_tokens_already_taken(self):
        today = timezone.localdate()
        QueueTokenCounter.objects.create(queue_date=today, last_token=0)
        QueueEntry.objects.create(patient=self.p3, queue_date=today, token_number=1, status=QueueEntry.STATUS_COMPLETED)
        r = self._add(self.p1, self.doctor)
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["token_number"], 2)

    def test_next_token_counts_up_for_the_day(self):
        today = timezone.localdate()
        with transaction.atomic():
            self.assertEqual(next_token(today), 1)
            self.assertEqual(next_token(today), 2)
        with transaction.atomic():
            self.assertEqual(next_token(today - timedelta(days=1)), 1)

    def test_priority_defaults_to_patient_priority(self):
        r = self._add(self.p1, self.doctor)
        self.assertEqual(QueueEntry.objects.get(id=r.data["queue_id"]).priority, 2)
        r = self._add(self.p2, self.doctor, priority=5)
        self.assertEqual(QueueEntry.objects.get(id=r.data["queue_id"]).priority, 5)

    def test_zero_priority_falls_back_to_patient_priority(self):
        r = self._add(self.p1, self.doctor, priority=0)
        self.assertEqual(QueueEntry.objects.get(id=r.data["queue_id"]).priority, 2)

    def test_patient_already_in_queue(self):
        first = self._add(self.p1, self.doctor)
        r = self._add(self.p1, self.doctor2)
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Patient already in queue today")
        self.assertEqual(r.data["queue_id"], first.data["queue_id"])

    def test_completed_patient_can_rejoin(self):
        first = self._add(self.p1, self.doctor)
        QueueEntry.objects.filter(id=first.data["queue_id"]).update(status=QueueEntry.STATUS_COMPLETED)
        r = self._add(self.p1, self.doctor)
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["token_number"], 2)

    def test_unknown_patient_returns_404(self):
        r = self._client_for(self.reception).post("/api/queue/", {"patient_id": 999999}, format="json")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_notes_limited_to_500_chars(self):
        r = self._add(self.p1, self.doctor, notes="x" * 501)
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_billing_cannot_add(self):
        r = self._client_for(self.billing).post("/api/queue/", {"patient_id": self.p1.id}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_duplicate_token_rejected_by_database(self):
        today = timezone.localdate()
        QueueEntry.objects.create(patient=self.p1, doctor=self.doctor, queue_date=today, token_number=1)
        with self.assertRaises(IntegrityError), transaction.atomic():
            QueueEntry.objects.create(patient=self.p2, doctor=self.doctor2, queue_date=today, token_number=1)

    def test_add_checks_in_appointment(self):
        appt = Appointment.objects.create(
            patient=self.p1, doctor=self.doctor, appointment_date=timezone.localdate(), appointment_time=time(9, 0)
        )
        r = self._add(self.p1, appointment_id=appt.id)
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        entry = QueueEntry.objects.get(id=r.data["queue_id"])
        self.assertEqual(entry.doctor, self.doctor)
        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_CHECKED_IN)

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def test_list_orders_by_priority_then_token(self):
        self._add(self.p3, self.doctor)
        self._add(self.p1, self.doctor)
        r = self._client_for(self.reception).get("/api/queue/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([row["patient_name"] for row in r.data], ["Anil", "Chitra"])
        self.assertIn("wait_time_minutes", r.data[0])

    def test_list_includes_vip_and_bp_alert(self):
        self._add(self.p2, self.doctor)
        Vitals.objects.create(patient=self.p2, bp_systolic=160, bp_diastolic=95)
        r = self._client_for(self.reception).get("/api/queue/")
        row = r.data[0]
        self.assertTrue(row["is_vip"])
        self.assertEqual(row["vip_tier"], "gold")
        self.assertTrue(row["bp_alert"])

    def test_doctor_sees_own_queue(self):
        self._add(self.p1, self.doctor)
        self._add(self.p2, self.doctor2)
        r = self._client_for(self.doctor).get("/api/queue/")
        self.assertEqual([row["patient"] for row in r.data], [self.p1.id])

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def test_status_flow_sets_timestamps_and_syncs_appointment(self):
        appt = Appointment.objects.create(
            patient=self.p1, doctor=self.doctor, appointment_date=timezone.localdate(), appointment_time=time(9, 0)
        )
        queue_id = self._add(self.p1, appointment_id=appt.id).data["queue_id"]
        client = self._client_for(self.doctor)

        r = client.patch(f"/api/queue/{queue_id}/status/", {"status": "in_progress"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(r.data["called_at"])
        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_IN_PROGRESS)

        r = client.patch(
            f"/api/queue/{queue_id}/status/", {"status": "completed", "skip_billing": True}, format="json"
        )
        self.assertIsNotNone(r.data["completed_at"])
        self.assertEqual(r.data["visit_status"], "with_staff")
        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_COMPLETED)

    def test_visit_status_kept_when_skip_billing_omitted(self):
        queue_id = self._add(self.p1, self.doctor).data["queue_id"]
        client = self._client_for(self.doctor)

        r = client.patch(
            f"/api/queue/{queue_id}/status/", {"status": "in_progress", "skip_billing": True}, format="json"
        )
        self.assertEqual(r.data["visit_status"], "with_staff")
        r = client.patch(f"/api/queue/{queue_id}/status/", {"status": "completed"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["visit_status"], "with_staff")

        entry = QueueEntry.objects.get(id=queue_id)
        update_queue_status(entry, QueueEntry.STATUS_COMPLETED, skip_billing=False)
        entry.refresh_from_db()
        self.assertEqual(entry.visit_status, QueueEntry.VISIT_UNBILLED)

    def test_invalid_status(self):
        queue_id = self._add(self.p1, self.doctor).data["queue_id"]
        r = self._client_for(self.reception).patch(f"/api/queue/{queue_id}/status/", {"status": "done"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_remove_from_queue(self):
        queue_id = self._add(self.p1, self.doctor).data["queue_id"]
        r = self._client_for(self.reception).delete(f"/api/queue/{queue_id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        r = self._client_for(self.reception).delete(f"/api/queue/{queue_id}/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def test_stats(self):
        now = timezone.now()
        today = timezone.localdate()
        done = QueueEntry.objects.create(
            patient=self.p1, doctor=self.doctor, queue_date=today, token_number=1,
            status=QueueEntry.STATUS_COMPLETED,
        )
        QueueEntry.objects.filter(id=done.id).update(
            check_in_time=now - timedelta(minutes=30), completed_at=now
        )
        done2 = QueueEntry.objects.create(
            patient=self.p2, doctor=self.doctor, queue_date=today, token_number=2,
            status=QueueEntry.STATUS_COMPLETED,
        )
        QueueEntry.objects.filter(id=done2.id).update(
            check_in_time=now - timedelta(minutes=11), completed_at=now
        )
        QueueEntry.objects.create(patient=self.p3, doctor=self.doctor, queue_date=today, token_number=3)

        stats = queue_stats()
        self.assertEqual(stats["today_total"], 3)
        self.assertEqual(stats["waiting"], 1)
        self.assertEqual(stats["completed"], 2)
        self.assertEqual(stats["avg_wait_time"], 20)

        r = self._client_for(self.reception).get("/api/queue/stats/", {"doctor_id": self.doctor2.id})
        self.assertEqual(r.data["today_total"], 0)
        self.assertEqual(r.data["avg_wait_time"], 0)


class BloodPressureAlertTest(TestCase):
    def test_thresholds(self):
        self.assertFalse(is_bp_abnormal(120, 80))
        self.assertFalse(is_bp_abnormal(140, 90))
        self.assertTrue(is_bp_abnormal(141, 80))
        self.assertTrue(is_bp_abnormal(89, 70))
        self.assertTrue(is_bp_abnormal(120, 91))
        self.assertTrue(is_bp_abnormal(120, 59))
        self.assertFalse(is_bp_abnormal(None, None))
