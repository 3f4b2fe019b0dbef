"""Tests for the ABHA registration/login flows and reporting endpoints.

ABDM is never contacted: ``requests.post`` inside the client is patched.
"""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

import requests
from django.test import TestCase
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient

from clinic_backend.abha.client import AbdmApiError, AbdmClient, mask_payload
from clinic_backend.abha.models import (
    AbhaAccount,
    AbhaApiLog,
    AbhaConsent,
    AbhaLoginSession,
    AbhaMeta,
    AbhaRecordLink,
    AbhaRegistrationSession,
)
from clinic_backend.abha.services import expire_stale_sessions, new_session_id
from clinic_backend.abha.tasks import expire_abha_sessions
from clinic_backend.core.models import Role, User
from clinic_backend.patients.models import Patient

POST_TARGET = "clinic_backend.abha.client.requests.post"


def _abdm_response(payload, status_code=200, reason="OK"):
    response = mock.Mock()
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload
    return response


class AbhaAPITestBase(TestCase):
    databases = {"default"}

    def setUp(self):
        roles = {}
        for name in ("admin", "reception", "nurse", "billing"):
            roles[name], _ = Role.objects.using("default").get_or_create(
                name=name, defaults={"label": name.title()}
            )
        self.admin = User.objects.db_manager("default").create_user(
            username="admin_abha", email="admin_abha@example.com", password="DummyPass123!", role=roles["admin"]
        )
        self.reception = User.objects.db_manager("default").create_user(
            username="reception_abha", email="reception_abha@example.com", password="DummyPass123!",
            role=roles["reception"]
        )
        self.nurse = User.objects.db_manager("default").create_user(
            username="nurse_abha", email="nurse_abha@example.com", password="DummyPass123!", role=roles["nurse"]
        )
        self.billing = User.objects.db_manager("default").create_user(
            username="billing_abha", email="billing_abha@example.com", password="DummyPass123!",
            role=roles["billing"]
        )
        self.patient = Patient.objects.create(uhid="PABHA1", name="Ravi Kumar", phone="9000000001")

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def _otp_session(self, model=AbhaRegistrationSession, **kwargs):
        defaults = {
            "session_id": new_session_id(),
            "txn_id": "txn-1",
            "status": model.STATUS_OTP_SENT,
            "expires_at": timezone.now() + timedelta(minutes=10),
        }
        defaults.update(kwargs)
        return model.objects.create(**defaults)


class RegistrationFlowTest(AbhaAPITestBase):

    # ------------------------------------------------------------------
    # register/init
    # ------------------------------------------------------------------

    def test_init_sends_otp_and_masks_aadhaar_in_log(self):
        with mock.patch(POST_TARGET, return_value=_abdm_response({"txnId": "txn-42"})) as post:
            r = self._client_for(self.reception).post(
                "/api/abha/register/init/",
                {"patient_id": self.patient.id, "aadhaar_number": "123456789012", "mobile_number": "9000000001"},
                format="json",
            )

        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data["success"])
        self.assertEqual(r.data["txn_id"], "txn-42")
        self.assertEqual(r.data["expires_in"], 900)
        self.assertEqual(len(r.data["session_id"]), 32)

        url = post.call_args.args[0]
        self.assertEqual(url, "https://abdm.test/abha/v3/register/aadhaar/generate-otp")
        self.assertEqual(post.call_args.kwargs["json"]["aadhaar"], "123456789012")

        session = AbhaRegistrationSession.objects.get(session_id=r.data["session_id"])
        self.assertEqual(session.status, AbhaRegistrationSession.STATUS_OTP_SENT)
        self.assertEqual(session.patient, self.patient)
        self.assertNotIn("12345678", session.aadhaar_masked)

        log = AbhaApiLog.objects.get()
        self.assertEqual(log.request_body["aadhaar"], "****")
        self.assertEqual(log.response_status, 200)
        self.assertEqual(log.session_id, session.session_id)

    def test_init_rejects_bad_aadhaar(self):
        with mock.patch(POST_TARGET) as post:
            r = self._client_for(self.reception).post(
                "/api/abha/register/init/", {"aadhaar_number": "1234"}, format="json"
            )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Invalid Aadhaar number format. Must be 12 digits.")
        post.assert_not_called()

    def test_init_requires_aadhaar(self):
        r = self._client_for(self.reception).post("/api/abha/register/init/", {}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_init_unknown_patient(self):
        r = self._client_for(self.reception).post(
            "/api/abha/register/init/", {"patient_id": 999999, "aadhaar_number": "123456789012"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_init_patient_already_linked(self):
        self.patient.abha_number = "91-1111-2222-3333"
        self.patient.save()
        r = self._client_for(self.reception).post(
            "/api/abha/register/init/",
            {"patient_id": self.patient.id, "aadhaar_number": "123456789012"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["abha_number"], "91-1111-2222-3333")

    def test_init_upstream_error_fails_session(self):
        upstream = _abdm_response({"message": "Aadhaar not found"}, status_code=422, reason="Unprocessable")
        with mock.patch(POST_TARGET, return_value=upstream):
            r = self._client_for(self.reception).post(
                "/api/abha/register/init/", {"aadhaar_number": "123456789012"}, format="json"
            )
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.data["error"], "ABDM API error")
        self.assertEqual(r.data["message"], "Aadhaar not found")
        self.assertEqual(r.data["details"], {"message": "Aadhaar not found"})

        session = AbhaRegistrationSession.objects.get()
        self.assertEqual(session.status, AbhaRegistrationSession.STATUS_FAILED)
        self.assertEqual(session.error_message, "Aadhaar not found")
        self.assertEqual(AbhaApiLog.objects.get().error_message, "Aadhaar not found")

    def test_init_network_error_is_bad_gateway(self):
        with mock.patch(POST_TARGET, side_effect=requests.ConnectionError("connection refused")):
            r = self._client_for(self.reception).post(
                "/api/abha/register/init/", {"aadhaar_number": "123456789012"}, format="json"
            )
        self.assertEqual(r.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(AbhaRegistrationSession.objects.get().status, AbhaRegistrationSession.STATUS_FAILED)

    def test_nurse_cannot_register_and_billing_cannot_read(self):
        r = self._client_for(self.nurse).post(
            "/api/abha/register/init/", {"aadhaar_number": "123456789012"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        r = self._client_for(self.billing).get(f"/api/abha/status/{self.patient.id}/")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # register/verify-otp
    # ------------------------------------------------------------------

    def test_verify_links_existing_patient(self):
        session = self._otp_session(patient=self.patient)
        abdm = {
            "ABHANumber": "91-1234-5678-9012",
            "preferredAbhaAddress": "ravi@abdm",
            "name": "Ravi Kumar",
            "mobile": "9000000001",
            "kycVerified": True,
            "token": "tok-1",
        }
        with mock.patch(POST_TARGET, return_value=_abdm_response(abdm)) as post:
            r = self._client_for(self.reception).post(
                "/api/abha/register/verify-otp/", {"session_id": session.session_id, "otp": "123456"}, format="json"
            )

        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(post.call_args.kwargs["json"], {"otp": "123456", "txnId": "txn-1"})
        self.assertEqual(r.data["abha_number"], "91-1234-5678-9012")
        self.assertEqual(r.data["patient_id"], self.patient.id)
        self.assertTrue(r.data["linked"])

        self.patient.refresh_from_db()
        self.assertEqual(self.patient.abha_number, "91-1234-5678-9012")
        self.assertEqual(self.patient.abha_address, "ravi@abdm")

        account = AbhaAccount.objects.get()
        self.assertEqual(account.patient, self.patient)
        self.assertTrue(account.kyc_verified)
        self.assertTrue(account.aadhaar_verified)
        self.assertTrue(account.mobile_verified)
        self.assertFalse(account.email_verified)
        self.assertEqual(account.abdm_token, "tok-1")

        session.refresh_from_db()
        self.assertEqual(session.status, AbhaRegistrationSession.STATUS_COMPLETED)
        self.assertEqual(AbhaApiLog.objects.get().request_body["otp"], "****")

    def test_verify_creates_patient_when_none_selected(self):
        session = self._otp_session()
        abdm = {"healthIdNumber": "91-0000-1111-2222", "healthId": "asha@abdm", "firstName": "Asha",
                "lastName": "Rao", "gender": "F", "stateName": "Kerala"}
        with mock.patch(POST_TARGET, return_value=_abdm_response(abdm)):
            r = self._client_for(self.reception).post(
                "/api/abha/register/verify-otp/", {"session_id": session.session_id, "otp": "111111"}, format="json"
            )

        self.assertEqual(r.status_code, status.HTTP_200_OK)
        patient = Patient.objects.get(pk=r.data["patient_id"])
        self.assertEqual(patient.name, "Asha Rao")
        self.assertEqual(patient.gender, Patient.GENDER_FEMALE)
        self.assertEqual(patient.state, "Kerala")
        self.assertEqual(patient.abha_number, "91-0000-1111-2222")
        self.assertTrue(patient.uhid.startswith("P"))
        self.assertEqual(r.data["patient"]["uhid"], patient.uhid)
        self.assertEqual(AbhaAccount.objects.get().patient, patient)

    def test_verify_upserts_existing_account(self):
        AbhaAccount.objects.create(abha_number="91-1234-5678-9012", status=AbhaAccount.STATUS_DEACTIVATED)
        session = self._otp_session(patient=self.patient)
        with mock.patch(POST_TARGET, return_value=_abdm_response({"ABHANumber": "91-1234-5678-9012"})):
            self._client_for(self.reception).post(
                "/api/abha/register/verify-otp/", {"session_id": session.session_id, "otp": "1"}, format="json"
            )
        account = AbhaAccount.objects.get()
        self.assertEqual(account.status, AbhaAccount.STATUS_ACTIVE)
        self.assertEqual(account.patient, self.patient)

    def test_reregister_after_unlink_with_new_abha_number(self):
        AbhaAccount.objects.create(patient=self.patient, abha_number="91-1111-1111-1111")
        client = self._client_for(self.reception)
        r = client.post("/api/abha/unlink/", {"patient_id": self.patient.id}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)

        with mock.patch(POST_TARGET, return_value=_abdm_response({"txnId": "txn-2"})):
            r = client.post(
                "/api/abha/register/init/",
                {"patient_id": self.patient.id, "aadhaar_number": "123456789012"},
                format="json",
            )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        session_id = r.data["session_id"]

        abdm = {"ABHANumber": "91-2222-2222-2222", "preferredAbhaAddress": "ravi.new@abdm"}
        with mock.patch(POST_TARGET, return_value=_abdm_response(abdm)):
            r = client.post(
                "/api/abha/register/verify-otp/", {"session_id": session_id, "otp": "123456"}, format="json"
            )

        self.assertEqual(r.status_code, status.HTTP_200_OK)
        account = AbhaAccount.objects.get()
        self.assertEqual(account.patient, self.patient)
        self.assertEqual(account.abha_number, "91-2222-2222-2222")
        self.assertEqual(account.status, AbhaAccount.STATUS_ACTIVE)
        self.patient.refresh_from_db()
        self.assertEqual(self.patient.abha_number, "91-2222-2222-2222")
        session = AbhaRegistrationSession.objects.get(session_id=session_id)
        self.assertEqual(session.status, AbhaRegistrationSession.STATUS_COMPLETED)

    def test_new_abha_number_already_on_another_account_moves_to_patient(self):
        AbhaAccount.objects.create(patient=self.patient, abha_number="91-1111-1111-1111")
        AbhaAccount.objects.create(abha_number="91-3333-3333-3333", status=AbhaAccount.STATUS_DEACTIVATED)
        session = self._otp_session(patient=self.patient)
        with mock.patch(POST_TARGET, return_value=_abdm_response({"ABHANumber": "91-3333-3333-3333"})):
            r = self._client_for(self.reception).post(
                "/api/abha/register/verify-otp/", {"session_id": session.session_id, "otp": "1"}, format="json"
            )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(AbhaAccount.objects.get(patient=self.patient).abha_number, "91-3333-3333-3333")
        self.assertIsNone(AbhaAccount.objects.get(abha_number="91-1111-1111-1111").patient)

    def test_verify_rejects_expired_or_unknown_session(self):
        expired = self._otp_session(expires_at=timezone.now() - timedelta(seconds=1))
        initiated = self._otp_session(status=AbhaRegistrationSession.STATUS_INITIATED)
        client = self._client_for(self.reception)
        with mock.patch(POST_TARGET) as post:
            for session_id in (expired.session_id, initiated.session_id, "nope"):
                r = client.post("/api/abha/register/verify-otp/", {"session_id": session_id, "otp": "1"}, format="json")
                self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(r.data["error"], "Invalid or expired session")
        post.assert_not_called()

    def test_verify_requires_otp(self):
        r = self._client_for(self.reception).post(
            "/api/abha/register/verify-otp/", {"session_id": "abc"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_wrong_otp_fails_session(self):
        session = self._otp_session(patient=self.patient)
        upstream = _abdm_response({"message": "Invalid OTP"}, status_code=400, reason="Bad Request")
        with mock.patch(POST_TARGET, return_value=upstream):
            r = self._client_for(self.reception).post(
                "/api/abha/register/verify-otp/", {"session_id": session.session_id, "otp": "000000"}, format="json"
            )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["message"], "Invalid OTP")
        session.refresh_from_db()
        self.assertEqual(session.status, AbhaRegistrationSession.STATUS_FAILED)
        self.assertFalse(AbhaAccount.objects.exists())


class LoginFlowTest(AbhaAPITestBase):

    def test_login_init_defaults_auth_method(self):
        with mock.patch(POST_TARGET, return_value=_abdm_response({"txnId": "txn-9"})) as post:
            r = self._client_for(self.reception).post(
                "/api/abha/login/init/", {"patient_id": self.patient.id, "abha_address": "ravi@abdm"}, format="json"
            )
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(post.call_args.args[0], "https://abdm.test/abha/v3/login/request-otp")
        self.assertEqual(post.call_args.kwargs["json"], {"healthId": "ravi@abdm", "authMethod": "aadhaar_otp"})
        session = AbhaLoginSession.objects.get(session_id=r.data["session_id"])
        self.assertEqual(session.status, AbhaLoginSession.STATUS_OTP_SENT)
        self.assertEqual(session.auth_method, "aadhaar_otp")

    def test_login_init_requires_fields(self):
        r = self._client_for(self.reception).post(
            "/api/abha/login/init/", {"patient_id": self.patient.id}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self._client_for(self.reception).post(
            "/api/abha/login/init/", {"patient_id": 999999, "abha_address": "x@abdm"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_login_verify_updates_tokens(self):
        AbhaAccount.objects.create(patient=self.patient, abha_number="91-1234-5678-9012")
        session = self._otp_session(AbhaLoginSession, patient=self.patient, abha_address="ravi@abdm")
        abdm = {"healthIdNumber": "91-1234-5678-9012", "token": "access-2", "refreshToken": "refresh-2"}
        with mock.patch(POST_TARGET, return_value=_abdm_response(abdm)):
            r = self._client_for(self.reception).post(
                "/api/abha/login/verify-otp/", {"session_id": session.session_id, "otp": "654321"}, format="json"
            )

        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["message"], "ABHA login successful")
        session.refresh_from_db()
        self.assertEqual(session.status, AbhaLoginSession.STATUS_AUTHENTICATED)

        account = AbhaAccount.objects.get()
        self.assertEqual(account.abdm_token, "access-2")
        self.assertEqual(account.refresh_token, "refresh-2")
        remaining = account.token_expires_at - timezone.now()
        self.assertTrue(timedelta(minutes=29) < remaining <= timedelta(minutes=30))

    def test_login_verify_expired_session(self):
        session = self._otp_session(
            AbhaLoginSession,
            patient=self.patient,
            abha_address="ravi@abdm",
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        r = self._client_for(self.reception).post(
            "/api/abha/login/verify-otp/", {"session_id": session.session_id, "otp": "1"}, format="json"
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)


class AbhaStatusAndReportingTest(AbhaAPITestBase):

    def _link(self, patient=None, **kwargs):
        patient = patient or self.patient
        patient.abha_number = kwargs.get("abha_number", "91-1234-5678-9012")
        patient.save()
        return AbhaAccount.objects.create(patient=patient, abha_number=patient.abha_number, **{
            k: v for k, v in kwargs.items() if k != "abha_number"
        })

    def test_status_without_account(self):
        r = self._client_for(self.nurse).get(f"/api/abha/status/{self.patient.id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(r.data["has_abha"])

    def test_status_with_account_uses_env_hfr_id(self):
        self._link(abha_address="ravi@abdm", kyc_verified=True)
        AbhaRecordLink.objects.create(patient=self.patient, record_type="prescription")
        r = self._client_for(self.nurse).get(f"/api/abha/status/{self.patient.id}/")
        self.assertTrue(r.data["has_abha"])
        self.assertEqual(r.data["abha_address"], "ravi@abdm")
        self.assertTrue(r.data["kyc_verified"])
        self.assertEqual(r.data["hfr_id"], "IN0000TEST")
        self.assertEqual(len(r.data["records"]), 1)

    def test_hfr_id_update_overrides_env(self):
        self._link()
        r = self._client_for(self.admin).patch("/api/abha/hfr-id/", {"hfr_id": "IN3310000123"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data, {"success": True, "hfr_id": "IN3310000123"})
        r = self._client_for(self.admin).patch("/api/abha/hfr-id/", {"hfr_id": "IN3310000999"}, format="json")
        self.assertEqual(AbhaMeta.objects.count(), 1)

        r = self._client_for(self.reception).get(f"/api/abha/status/{self.patient.id}/")
        self.assertEqual(r.data["hfr_id"], "IN3310000999")

    def test_hfr_id_admin_only_and_required(self):
        r = self._client_for(self.reception).patch("/api/abha/hfr-id/", {"hfr_id": "X"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        r = self._client_for(self.admin).patch("/api/abha/hfr-id/", {}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_records(self):
        AbhaRecordLink.objects.create(patient=self.patient, record_type="lab", upload_status="uploaded")
        AbhaRecordLink.objects.create(patient=self.patient, record_type="prescription")
        r = self._client_for(self.reception).get(f"/api/abha/records/{self.patient.id}/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual({row["record_type"] for row in r.data["records"]}, {"lab", "prescription"})

    def test_unlink(self):
        account = self._link(abha_address="ravi@abdm")
        r = self._client_for(self.reception).post("/api/abha/unlink/", {"patient_id": self.patient.id}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.patient.refresh_from_db()
        self.assertEqual(self.patient.abha_number, "")
        self.assertEqual(self.patient.health_id, "")
        account.refresh_from_db()
        self.assertEqual(account.status, AbhaAccount.STATUS_DEACTIVATED)

    def test_unlink_requires_patient_id(self):
        r = self._client_for(self.reception).post("/api/abha/unlink/", {}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stats_counts_today_by_default(self):
        self._link(kyc_verified=True)
        other = Patient.objects.create(uhid="PABHA2", name="Meena")
        self._link(other, abha_number="91-9999-8888-7777")
        old = AbhaAccount.objects.create(abha_number="91-0000-0000-0001")
        AbhaAccount.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=10))
        for consent_status in ("granted", "granted", "denied", "revoked", "requested"):
            AbhaConsent.objects.create(patient=self.patient, status=consent_status)

        r = self._client_for(self.reception).get("/api/abha/stats/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(
            r.data,
            {"total": 2, "kyc_count": 1, "non_kyc_count": 1, "consent_given": 2, "consent_declined": 2},
        )

        start = (timezone.localdate() - timedelta(days=30)).isoformat()
        r = self._client_for(self.reception).get("/api/abha/stats/", {"start_date": start})
        self.assertEqual(r.data["total"], 3)

    def test_stats_rejects_bad_date(self):
        r = self._client_for(self.reception).get("/api/abha/stats/", {"start_date": "yesterday"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_dashboard(self):
        self._link()
        Patient.objects.create(uhid="PABHA3", name="Unlinked")
        AbhaConsent.objects.create(patient=self.patient)
        AbhaRecordLink.objects.create(patient=self.patient)
        AbhaRecordLink.objects.create(patient=self.patient, upload_status="uploaded")

        r = self._client_for(self.nurse).get("/api/abha/dashboard/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["hfr_id"], "IN0000TEST")
        self.assertEqual(r.data["total_patients"], 2)
        self.assertEqual(r.data["linked_patients"], 1)
        self.assertEqual(r.data["consent_requests"], 1)
        self.assertEqual(r.data["pending_uploads"], 1)
        self.assertIn("last_updated", r.data)


class AbhaSessionExpiryTest(AbhaAPITestBase):

    def test_expire_stale_sessions(self):
        past = timezone.now() - timedelta(minutes=1)
        stale = self._otp_session(expires_at=past)
        fresh = self._otp_session()
        done = self._otp_session(status=AbhaRegistrationSession.STATUS_COMPLETED, expires_at=past)
        login = self._otp_session(
            AbhaLoginSession, patient=self.patient, abha_address="x@abdm",
            status=AbhaLoginSession.STATUS_INITIATED, expires_at=past,
        )

        self.assertEqual(expire_abha_sessions.apply().get(), 2)

        for session, expected in ((stale, "expired"), (fresh, "otp_sent"), (done, "completed"), (login, "expired")):
            session.refresh_from_db()
            self.assertEqual(session.status, expected)
        self.assertEqual(expire_stale_sessions(), 0)


class AbdmClientTest(TestCase):
    databases = {"default"}

    def test_mask_payload(self):
        self.assertEqual(
            mask_payload({"aadhaar": "123456789012", "otp": "1234", "mobile": "900", "txnId": "t"}),
            {"aadhaar": "****", "otp": "****", "mobile": "900", "txnId": "t"},
        )

    def test_error_without_json_body_uses_reason(self):
        response = _abdm_response(None, status_code=503, reason="Service Unavailable")
        response.json.side_effect = ValueError("no json")
        with mock.patch(POST_TARGET, return_value=response):
            with self.assertRaises(AbdmApiError) as ctx:
                AbdmClient(base_url="https://abdm.example/").login_verify_otp("1", "t")
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.to_dict()["message"], "Service Unavailable")
        self.assertEqual(AbhaApiLog.objects.get().endpoint, "https://abdm.example/abha/v3/login/verify-otp")
