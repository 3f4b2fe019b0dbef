"""Tests for patient referrals and the referral network."""

from __future__ import annotations

from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient

from clinic_backend.core.models import Role, User
from clinic_backend.patients.models import Patient
from clinic_backend.referrals.models import PatientReferral, ReferralDoctor


class ReferralAPITest(TestCase):
    databases = {"default"}

    def setUp(self):
        roles = {}
        for name in ("admin", "doctor", "nurse", "billing"):
            roles[name], _ = Role.objects.using("default").get_or_create(
                name=name, defaults={"label": name.title()}
            )
        self.admin = User.objects.db_manager("default").create_user(
            username="admin_ref", email="admin_ref@example.com", password="DummyPass123!", role=roles["admin"]
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_ref", email="doctor_ref@example.com", password="DummyPass123!", role=roles["doctor"]
        )
        self.doctor2 = User.objects.db_manager("default").create_user(
            username="doctor2_ref", email="doctor2_ref@example.com", password="DummyPass123!", role=roles["doctor"]
        )
        self.nurse = User.objects.db_manager("default").create_user(
            username="nurse_ref", email="nurse_ref@example.com", password="DummyPass123!", role=roles["nurse"]
        )
        self.billing = User.objects.db_manager("default").create_user(
            username="billing_ref", email="billing_ref@example.com", password="DummyPass123!", role=roles["billing"]
        )
        self.patient = Patient.objects.create(uhid="PREF1", name="Latha")
        self.cardio = ReferralDoctor.objects.create(
            name="Dr. Iyer", specialization="Cardiology", hospital="Heart Care", created_by=self.doctor
        )

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    # ------------------------------------------------------------------
    # Referrals
    # ------------------------------------------------------------------

    def test_create_to_network_doctor_increments_count(self):
        r = self._client_for(self.doctor).post(
            "/api/referrals/",
            {"patient_id": self.patient.id, "referral_date": "2026-03-01", "referred_to_doctor_id": self.cardio.id},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data["success"])
        referral = PatientReferral.objects.get(id=r.data["referral_id"])
        self.assertEqual(referral.priority, "routine")
        self.assertEqual(referral.status, "pending")
        self.assertEqual(referral.referred_by, self.doctor)
        self.assertEqual(r.data["referral"]["referred_to_doctor_name"], "Dr. Iyer")
        self.cardio.refresh_from_db()
        self.assertEqual(self.cardio.referral_count, 1)

    def test_create_with_free_text_doctor(self):
        r = self._client_for(self.doctor).post(
            "/api/referrals/",
            {
                "patient_id": self.patient.id,
                "referral_date": "2026-03-01",
                "referred_doctor_name": "Dr. Das",
                "referred_doctor_specialization": "ENT",
                "priority": "urgent",
            },
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        referral = PatientReferral.objects.get(id=r.data["referral_id"])
        self.assertEqual(referral.specialty, "ENT")
        self.assertEqual(referral.priority, "urgent")

    def test_create_requires_target(self):
        r = self._client_for(self.doctor).post(
            "/api/referrals/", {"patient_id": self.patient.id, "referral_date": "2026-03-01"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_requires_date(self):
        r = self._client_for(self.doctor).post(
            "/api/referrals/", {"patient_id": self.patient.id, "referred_doctor_name": "Dr. Das"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_unknown_network_doctor(self):
        r = self._client_for(self.doctor).post(
            "/api/referrals/",
            {"patient_id": self.patient.id, "referral_date": "2026-03-01", "referred_to_doctor_id": 999999},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_doctor_sees_only_own_referrals(self):
        PatientReferral.objects.create(
            patient=self.patient, referred_by=self.doctor, referred_doctor_name="A", referral_date="2026-03-01"
        )
        other = PatientReferral.objects.create(
            patient=self.patient, referred_by=self.doctor2, referred_doctor_name="B", referral_date="2026-03-02"
        )
        r = self._client_for(self.doctor).get("/api/referrals/")
        self.assertEqual([row["referred_doctor_name"] for row in r.data], ["A"])
        self.assertEqual(len(self._client_for(self.nurse).get("/api/referrals/").data), 2)
        r = self._client_for(self.doctor).get(f"/api/referrals/{other.id}/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_allow_list(self):
        referral = PatientReferral.objects.create(
            patient=self.patient, referred_by=self.doctor, referred_doctor_name="A", referral_date="2026-03-01"
        )
        client = self._client_for(self.doctor)
        r = client.put(f"/api/referrals/{referral.id}/", {"patient": 12345}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "No fields to update")

        r = client.put(
            f"/api/referrals/{referral.id}/", {"status": "accepted", "outcome": "Seen", "patient": 1}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        referral.refresh_from_db()
        self.assertEqual(referral.status, "accepted")
        self.assertEqual(referral.outcome, "Seen")
        self.assertEqual(referral.patient, self.patient)

    def test_update_rejects_bad_status(self):
        referral = PatientReferral.objects.create(
            patient=self.patient, referred_by=self.doctor, referred_doctor_name="A", referral_date="2026-03-01"
        )
        r = self._client_for(self.doctor).patch(f"/api/referrals/{referral.id}/", {"status": "lost"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete(self):
        referral = PatientReferral.objects.create(
            patient=self.patient, referred_by=self.doctor, referred_doctor_name="A", referral_date="2026-03-01"
        )
        r = self._client_for(self.admin).delete(f"/api/referrals/{referral.id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(PatientReferral.objects.exists())

    def test_nurse_read_only_and_billing_denied(self):
        r = self._client_for(self.nurse).post(
            "/api/referrals/",
            {"patient_id": self.patient.id, "referral_date": "2026-03-01", "referred_doctor_name": "X"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self._client_for(self.billing).get("/api/referrals/").status_code, 403)

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def test_network_ordering(self):
        ReferralDoctor.objects.create(name="Dr. Zed", referral_count=5, created_by=self.doctor)
        ReferralDoctor.objects.create(name="Dr. Abel", referral_count=5, created_by=self.doctor)
        ReferralDoctor.objects.create(name="Dr. Pref", is_preferred=True, created_by=self.doctor)
        ReferralDoctor.objects.create(name="Dr. Gone", is_active=False, created_by=self.doctor)
        ReferralDoctor.objects.create(name="Dr. Other", created_by=self.doctor2)

        r = self._client_for(self.doctor).get("/api/referrals/network/doctors/")
        self.assertEqual(
            [row["name"] for row in r.data],
            ["Dr. Pref", "Dr. Abel", "Dr. Zed", "Dr. Iyer"],
        )

    def test_network_crud(self):
        client = self._client_for(self.doctor)
        r = client.post("/api/referrals/network/doctors/", {"name": "Dr. Sen", "specialization": "Ortho"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        doctor_id = r.data["id"]
        self.assertEqual(ReferralDoctor.objects.get(id=doctor_id).created_by, self.doctor)

        r = client.put(f"/api/referrals/network/doctors/{doctor_id}/", {"unknown": 1}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

        r = client.put(f"/api/referrals/network/doctors/{doctor_id}/", {"is_preferred": True}, format="json")
        self.assertTrue(r.data["is_preferred"])

        r = client.delete(f"/api/referrals/network/doctors/{doctor_id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(ReferralDoctor.objects.get(id=doctor_id).is_active)

    def test_network_name_required(self):
        r = self._client_for(self.doctor).post("/api/referrals/network/doctors/", {"city": "Pune"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
