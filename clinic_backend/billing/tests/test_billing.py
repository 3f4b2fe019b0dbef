"""Tests for bills, receipt templates and subscriptions."""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient

from clinic_backend.appointments.models import Appointment
from clinic_backend.billing.models import (
    Bill,
    PatientSubscription,
    ReceiptTemplate,
    SubscriptionPackage,
    SubscriptionSession,
)
from clinic_backend.billing.services import (
    normalize_items,
    payment_status_for,
    subscription_code,
)
from clinic_backend.core.exceptions import InvalidRequest
from clinic_backend.core.models import Clinic, Role, User
from clinic_backend.opd_queue.models import QueueEntry
from clinic_backend.patients.models import Patient


class BillingTestCase(TestCase):
    databases = {"default"}

    def setUp(self):
        self.clinic = Clinic.objects.create(name="City Clinic")
        roles = {}
        for name in ("admin", "doctor", "billing", "nurse"):
            roles[name], _ = Role.objects.using("default").get_or_create(
                name=name, defaults={"label": name.title()}
            )
        self.admin = User.objects.db_manager("default").create_user(
            username="admin_b", email="admin_b@example.com", password="DummyPass123!",
            role=roles["admin"], clinic=self.clinic,
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_b", email="doctor_b@example.com", password="DummyPass123!",
            role=roles["doctor"], clinic=self.clinic,
        )
        self.doctor2 = User.objects.db_manager("default").create_user(
            username="doctor2_b", email="doctor2_b@example.com", password="DummyPass123!",
            role=roles["doctor"], clinic=self.clinic,
        )
        self.billing = User.objects.db_manager("default").create_user(
            username="billing_b", email="billing_b@example.com", password="DummyPass123!",
            role=roles["billing"], clinic=self.clinic,
        )
        self.nurse = User.objects.db_manager("default").create_user(
            username="nurse_b", email="nurse_b@example.com", password="DummyPass123!",
            role=roles["nurse"], clinic=self.clinic,
        )
        self.patient = Patient.objects.create(uhid="PB1", name="Devika", phone="9876500001")

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def _appointment(self, **extra):
        values = {
            "patient": self.patient,
            "doctor": self.doctor,
            "appointment_date": timezone.localdate(),
            "appointment_time": time(10, 0),
        }
        values.update(extra)
        return Appointment.objects.create(**values)


class BillAPITest(BillingTestCase):
    def test_create_bill_from_items(self):
        items = [
            {"service_name": "Consultation", "quantity": 1, "unit_price": "500"},
            {"service": "Dressing", "qty": 2, "price": "100", "discount": "20", "tax": "10"},
        ]
        r = self._client_for(self.billing).post(
            "/api/bills/", {"patient_id": self.patient.id, "items": items, "amount_paid": "200"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data["success"])
        bill = Bill.objects.get(id=r.data["bill_id"])
        self.assertEqual(bill.subtotal, Decimal("690.00"))
        self.assertEqual(bill.total_amount, Decimal("690.00"))
        self.assertEqual(bill.balance_due, Decimal("490.00"))
        self.assertEqual(bill.payment_status, "partial")
        self.assertTrue(bill.bill_number.startswith("BILL"))
        self.assertEqual(bill.clinic, self.clinic)
        self.assertEqual(
            [(i.service_name, i.total_price, i.sort_order) for i in bill.items.all()],
            [("Consultation", Decimal("500.00"), 1), ("Dressing", Decimal("190.00"), 2)],
        )

    def test_malformed_item_values_are_rejected(self):
        for item in (
            {"service_name": "Consultation", "quantity": "two", "unit_price": "500"},
            {"service_name": "Consultation", "quantity": 0},
            {"service_name": "Consultation", "unit_price": "five hundred"},
        ):
            r = self._client_for(self.billing).post(
                "/api/bills/", {"patient_id": self.patient.id, "items": [item]}, format="json"
            )
            self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("items", r.data)
        self.assertFalse(Bill.objects.exists())

    def test_normalize_items_rejects_bad_quantity(self):
        with self.assertRaises(InvalidRequest):
            normalize_items([{"service_name": "X", "quantity": "two"}])
        with self.assertRaises(InvalidRequest):
            normalize_items(["Consultation"])

    def test_patient_id_required(self):
        r = self._client_for(self.billing).post("/api/bills/", {"items": []}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_bill_for_appointment(self):
        appt = self._appointment()
        client = self._client_for(self.billing)
        first = client.post(
            "/api/bills/", {"patient_id": self.patient.id, "appointment_id": appt.id, "total_amount": "300"},
            format="json",
        )
        r = client.post(
            "/api/bills/", {"patient_id": self.patient.id, "appointment_id": appt.id, "total_amount": "300"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data["existing_bill_id"], first.data["bill_id"])

    def test_bill_for_another_appointment_is_allowed(self):
        client = self._client_for(self.billing)
        a1 = self._appointment()
        a2 = self._appointment(appointment_time=time(11, 0))
        client.post("/api/bills/", {"patient_id": self.patient.id, "appointment_id": a1.id}, format="json")
        r = client.post("/api/bills/", {"patient_id": self.patient.id, "appointment_id": a2.id}, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)

    def test_paid_bill_syncs_appointment_and_queue(self):
        appt = self._appointment()
        entry = QueueEntry.objects.create(
            patient=self.patient, doctor=self.doctor, appointment=appt,
            queue_date=timezone.localdate(), token_number=1,
        )
        r = self._client_for(self.billing).post(
            "/api/bills/",
            {"patient_id": self.patient.id, "appointment_id": appt.id, "total_amount": "400", "amount_paid": "400"},
            format="json",
        )
        self.assertEqual(r.data["bill"]["payment_status"], "paid")
        appt.refresh_from_db()
        entry.refresh_from_db()
        self.assertEqual(appt.payment_status, "paid")
        self.assertEqual(entry.status, QueueEntry.STATUS_COMPLETED)
        self.assertEqual(entry.visit_status, QueueEntry.VISIT_BILLED)
        self.assertIsNotNone(entry.completed_at)

    def test_record_payment(self):
        bill_id = self._client_for(self.billing).post(
            "/api/bills/", {"patient_id": self.patient.id, "total_amount": "1000"}, format="json"
        ).data["bill_id"]
        client = self._client_for(self.billing)

        r = client.patch(f"/api/bills/{bill_id}/", {"amount_paid": "250"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["payment_status"], "partial")
        self.assertEqual(Decimal(r.data["balance_due"]), Decimal("750.00"))

        r = client.patch(f"/api/bills/{bill_id}/", {"amount_paid": "1200"}, format="json")
        self.assertEqual(r.data["payment_status"], "paid")
        self.assertEqual(Decimal(r.data["balance_due"]), Decimal("0.00"))

    def test_list_is_paginated_and_searchable(self):
        other = Patient.objects.create(uhid="PB2", name="Farhan")
        client = self._client_for(self.billing)
        client.post("/api/bills/", {"patient_id": self.patient.id}, format="json")
        client.post("/api/bills/", {"patient_id": other.id}, format="json")

        r = client.get("/api/bills/", {"search": "farh"})
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["pagination"]["total"], 1)
        self.assertEqual(r.data["results"][0]["patient_name"], "Farhan")

    def test_nurse_is_read_only(self):
        self.assertEqual(self._client_for(self.nurse).get("/api/bills/").status_code, status.HTTP_200_OK)
        r = self._client_for(self.nurse).post("/api/bills/", {"patient_id": self.patient.id}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_bill(self):
        bill_id = self._client_for(self.billing).post(
            "/api/bills/", {"patient_id": self.patient.id}, format="json"
        ).data["bill_id"]
        r = self._client_for(self.admin).delete(f"/api/bills/{bill_id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(Bill.objects.filter(id=bill_id).exists())

    def test_patient_bills(self):
        self._client_for(self.billing).post("/api/bills/", {"patient_id": self.patient.id}, format="json")
        r = self._client_for(self.billing).get(f"/api/patients/{self.patient.id}/bills/")
        self.assertEqual(len(r.data), 1)
        self.assertEqual(self._client_for(self.billing).get("/api/patients/999999/bills/").status_code, 404)


class AppointmentPaymentStatusTest(BillingTestCase):
    def test_without_bill_returns_no_bill_found(self):
        appt = self._appointment()
        r = self._client_for(self.billing).patch(
            f"/api/appointments/{appt.id}/payment-status/", {"payment_status": "paid"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data["code"], "NO_BILL_FOUND")

    def test_falls_back_to_todays_patient_bill(self):
        appt = self._appointment()
        bill_id = self._client_for(self.billing).post(
            "/api/bills/", {"patient_id": self.patient.id, "total_amount": "300"}, format="json"
        ).data["bill_id"]
        r = self._client_for(self.billing).patch(
            f"/api/appointments/{appt.id}/payment-status/", {"payment_status": "paid"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["bill_id"], bill_id)
        bill = Bill.objects.get(id=bill_id)
        self.assertEqual(bill.appointment, appt)
        self.assertEqual(bill.amount_paid, Decimal("300.00"))
        appt.refresh_from_db()
        self.assertEqual(appt.payment_status, "paid")

    def test_invalid_payment_status(self):
        appt = self._appointment()
        self._client_for(self.billing).post(
            "/api/bills/", {"patient_id": self.patient.id, "appointment_id": appt.id}, format="json"
        )
        r = self._client_for(self.billing).patch(
            f"/api/appointments/{appt.id}/payment-status/", {"payment_status": "waived"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)


class ReceiptTemplateAPITest(BillingTestCase):
    def test_default_requires_clinic_id(self):
        r = self._client_for(self.billing).get("/api/receipt-templates/default/")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "clinic_id is required")

    def test_marking_default_unsets_others(self):
        client = self._client_for(self.billing)
        first = client.post(
            "/api/receipt-templates/",
            {"template_name": "Standard", "clinic": self.clinic.id, "is_default": True},
            format="json",
        )
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        second = client.post(
            "/api/receipt-templates/",
            {"template_name": "Letterhead", "clinic": self.clinic.id, "is_default": True},
            format="json",
        )
        self.assertFalse(ReceiptTemplate.objects.get(id=first.data["id"]).is_default)

        r = client.get("/api/receipt-templates/default/", {"clinic_id": self.clinic.id})
        self.assertEqual(r.data["id"], second.data["id"])

    def test_default_missing(self):
        r = self._client_for(self.billing).get("/api/receipt-templates/default/", {"clinic_id": self.clinic.id})
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_template_name_required(self):
        r = self._client_for(self.billing).post("/api/receipt-templates/", {"header_content": "x"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)


class SubscriptionAPITest(BillingTestCase):
    def setUp(self):
        super().setUp()
        self.package = SubscriptionPackage.objects.create(
            name="Physio x3", num_sessions=3, total_price=Decimal("1500"), validity_days=30
        )
        self.doctor_package = SubscriptionPackage.objects.create(
            doctor=self.doctor2, name="Dr2 plan", num_sessions=5, total_price=Decimal("2000"), validity_days=60
        )

    def _enroll(self, package=None, start=None, amount_paid="500"):
        return self._client_for(self.billing).post(
            "/api/subscriptions/",
            {
                "patient_id": self.patient.id,
                "package_id": (package or self.package).id,
                "start_date": (start or timezone.localdate()).isoformat(),
                "amount_paid": amount_paid,
            },
            format="json",
        )

    def test_doctor_sees_shared_and_own_packages(self):
        own = self._client_for(self.doctor).post(
            "/api/packages/",
            {"name": "Dr1 plan", "num_sessions": 4, "total_price": "800", "validity_days": 20},
            format="json",
        )
        self.assertEqual(own.status_code, status.HTTP_201_CREATED)
        self.assertEqual(own.data["doctor"], self.doctor.id)

        r = self._client_for(self.doctor).get("/api/packages/")
        self.assertEqual({row["name"] for row in r.data}, {"Physio x3", "Dr1 plan"})

    def test_doctor_cannot_edit_other_doctors_package(self):
        r = self._client_for(self.doctor).patch(
            f"/api/packages/{self.doctor_package.id}/", {"name": "Taken"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_num_sessions_must_be_positive(self):
        r = self._client_for(self.admin).post(
            "/api/packages/",
            {"name": "Empty", "num_sessions": 0, "total_price": "100", "validity_days": 10},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_deactivates(self):
        r = self._client_for(self.admin).delete(f"/api/packages/{self.package.id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.package.refresh_from_db()
        self.assertFalse(self.package.is_active)
        names = {row["name"] for row in self._client_for(self.admin).get("/api/packages/").data}
        self.assertNotIn("Physio x3", names)

    def test_enroll(self):
        start = timezone.localdate()
        r = self._enroll(start=start)
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        sub = PatientSubscription.objects.get(id=r.data["subscription_id"])
        self.assertEqual(sub.code, f"SUB{start.year}{self.patient.id:05d}{self.package.id:03d}")
        self.assertEqual(sub.end_date, start + timedelta(days=30))
        self.assertEqual(sub.amount_due, Decimal("1000.00"))
        self.assertEqual(sub.payment_status, "partial")
        self.assertEqual(sub.sessions_total, 3)

        listed = self._client_for(self.billing).get(f"/api/patients/{self.patient.id}/subscriptions/")
        self.assertEqual(listed.data[0]["sessions_remaining"], 3)

    def test_enroll_unknown_package(self):
        r = self._client_for(self.billing).post(
            "/api/subscriptions/",
            {"patient_id": self.patient.id, "package_id": 999999, "start_date": timezone.localdate().isoformat()},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_use_sessions_until_completed(self):
        sub_id = self._enroll().data["subscription_id"]
        client = self._client_for(self.billing)
        for expected in (1, 2):
            r = client.post(f"/api/subscriptions/{sub_id}/use-session/", {}, format="json")
            self.assertEqual(r.data["sessions_used"], expected)
            self.assertEqual(r.data["status"], "active")

        r = client.post(f"/api/subscriptions/{sub_id}/use-session/", {}, format="json")
        self.assertEqual(r.data["sessions_remaining"], 0)
        self.assertEqual(r.data["status"], "completed")
        self.assertEqual(SubscriptionSession.objects.filter(subscription_id=sub_id).count(), 3)

        r = client.post(f"/api/subscriptions/{sub_id}/use-session/", {}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Subscription is not active or has expired")

    def test_expired_subscription_rejects_sessions(self):
        sub_id = self._enroll(start=timezone.localdate() - timedelta(days=45)).data["subscription_id"]
        r = self._client_for(self.billing).post(f"/api/subscriptions/{sub_id}/use-session/", {}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_no_sessions_remaining(self):
        sub_id = self._enroll().data["subscription_id"]
        PatientSubscription.objects.filter(id=sub_id).update(sessions_used=3)
        r = self._client_for(self.billing).post(f"/api/subscriptions/{sub_id}/use-session/", {}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "No sessions remaining in this subscription")

    def test_completing_appointment_uses_a_session(self):
        sub_id = self._enroll().data["subscription_id"]
        appt = self._appointment(status=Appointment.STATUS_IN_PROGRESS)
        r = self._client_for(self.doctor).patch(
            f"/api/appointments/{appt.id}/status/", {"status": "completed"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        sub = PatientSubscription.objects.get(id=sub_id)
        self.assertEqual(sub.sessions_used, 1)
        self.assertEqual(sub.sessions.get().appointment, appt)


class BillingHelpersTest(TestCase):
    def test_payment_status_for(self):
        self.assertEqual(payment_status_for(Decimal("100"), Decimal("0")), "pending")
        self.assertEqual(payment_status_for(Decimal("100"), Decimal("40")), "partial")
        self.assertEqual(payment_status_for(Decimal("100"), Decimal("100")), "paid")
        self.assertEqual(payment_status_for(Decimal("0"), Decimal("0")), "pending")

    def test_normalize_items_defaults(self):
        rows = normalize_items([{"amount": "50"}])
        self.assertEqual(rows[0]["service_name"], "Service")
        self.assertEqual(rows[0]["quantity"], 1)
        self.assertEqual(rows[0]["total_price"], Decimal("50.00"))

    def test_subscription_code(self):
        self.assertEqual(subscription_code(42, 7, 2026), "SUB202600042007")
