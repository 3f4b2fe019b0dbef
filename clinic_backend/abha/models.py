"""ABHA (Ayushman Bharat Health Account) linkage and ABDM session tracking."""

from django.db import models
from django.utils import timezone


class AbhaAccount(models.Model):
    """A patient's verified ABHA account as returned by ABDM."""

    STATUS_ACTIVE = 'active'
    STATUS_DEACTIVATED = 'deactivated'

    STATUS_CHOICES = (
        (STATUS_ACTIVE, STATUS_ACTIVE),
        (STATUS_DEACTIVATED, STATUS_DEACTIVATED),
    )

    patient = models.OneToOneField(
        'patients.Patient',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='abha_account',
    )
    abha_number = models.CharField(max_length=32, unique=True)
    abha_address = models.CharField(max_length=128, blank=True, default='')
    health_id = models.CharField(max_length=128, blank=True, default='')

    name = models.CharField(max_length=200, blank=True, default='')
    first_name = models.CharField(max_length=100, blank=True, default='')
    middle_name = models.CharField(max_length=100, blank=True, default='')
    last_name = models.CharField(max_length=100, blank=True, default='')
    gender = models.CharField(max_length=10, blank=True, default='')
    date_of_birth = models.CharField(max_length=20, blank=True, default='')
    mobile = models.CharField(max_length=20, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    address = models.TextField(blank=True, default='')
    district = models.CharField(max_length=100, blank=True, default='')
    state = models.CharField(max_length=100, blank=True, default='')
    pincode = models.CharField(max_length=10, blank=True, default='')

    kyc_verified = models.BooleanField(default=False)
    aadhaar_verified = models.BooleanField(default=False)
    mobile_verified = models.BooleanField(default=False)
    email_verified = models.BooleanField(default=False)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)

    abdm_token = models.TextField(blank=True, default='')
    refresh_token = models.TextField(blank=True, default='')
    token_expires_at = models.DateTimeField(null=True, blank=True)

    registered_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.abha_number} ({self.status})"


class AbhaRegistrationSession(models.Model):
    STATUS_INITIATED = 'initiated'
    STATUS_OTP_SENT = 'otp_sent'
    STATUS_COMPLETED = 'completed'
    STATUS_FAILED = 'failed'
    STATUS_EXPIRED = 'expired'

    STATUS_CHOICES = (
        (STATUS_INITIATED, STATUS_INITIATED),
        (STATUS_OTP_SENT, STATUS_OTP_SENT),
        (STATUS_COMPLETED, STATUS_COMPLETED),
        (STATUS_FAILED, STATUS_FAILED),
        (STATUS_EXPIRED, STATUS_EXPIRED),
    )

    session_id = models.CharField(max_length=64, unique=True)
    patient = models.ForeignKey(
        'patients.Patient',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='abha_registration_sessions',
    )
    # Only the last four digits are kept.
    aadhaar_masked = models.CharField(max_length=16, blank=True, default='')
    mobile_number = models.CharField(max_length=20, blank=True, default='')
    txn_id = models.CharField(max_length=128, blank=True, default='')
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_INITIATED)
    request_data = models.JSONField(default=dict, blank=True)
    response_data = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(blank=True, default='')
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='abha_reg_status_exp_idx'),
        ]

    def __str__(self) -> str:
        return f"register {self.session_id} ({self.status})"


class AbhaLoginSession(models.Model):
    STATUS_INITIATED = 'initiated'
    STATUS_OTP_SENT = 'otp_sent'
    STATUS_AUTHENTICATED = 'authenticated'
    STATUS_FAILED = 'failed'
    STATUS_EXPIRED = 'expired'

    STATUS_CHOICES = (
        (STATUS_INITIATED, STATUS_INITIATED),
        (STATUS_OTP_SENT, STATUS_OTP_SENT),
        (STATUS_AUTHENTICATED, STATUS_AUTHENTICATED),
        (STATUS_FAILED, STATUS_FAILED),
        (STATUS_EXPIRED, STATUS_EXPIRED),
    )

    session_id = models.CharField(max_length=64, unique=True)
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.CASCADE,
        related_name='abha_login_sessions',
    )
    abha_address = models.CharField(max_length=128)
    auth_method = models.CharField(max_length=32, default='aadhaar_otp')
    txn_id = models.CharField(max_length=128, blank=True, default='')
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default=STATUS_INITIATED)
    response_data = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(blank=True, default='')
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='abha_login_status_exp_idx'),
        ]

    def __str__(self) -> str:
        return f"login {self.session_id} ({self.status})"


class AbhaApiLog(models.Model):
    """One outbound ABDM call. Aadhaar numbers and OTPs are stored masked."""

    endpoint = models.CharField(max_length=255)
    method = models.CharField(max_length=10, default='POST')
    patient_id = models.BigIntegerField(null=True, blank=True)
    session_id = models.CharField(max_length=64, blank=True, default='')
    request_body = models.JSONField(default=dict, blank=True)
    response_status = models.PositiveSmallIntegerField(null=True, blank=True)
    response_body = models.JSONField(default=dict, blank=True)
    response_time_ms = models.PositiveIntegerField(null=True, blank=True)
    error_message = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.method} {self.endpoint} -> {self.response_status}"


class AbhaConsent(models.Model):
    STATUS_REQUESTED = 'requested'
    STATUS_GRANTED = 'granted'
    STATUS_DENIED = 'denied'
    STATUS_REVOKED = 'revoked'
    STATUS_EXPIRED = 'expired'

    STATUS_CHOICES = (
        (STATUS_REQUESTED, STATUS_REQUESTED),
        (STATUS_GRANTED, STATUS_GRANTED),
        (STATUS_DENIED, STATUS_DENIED),
        (STATUS_REVOKED, STATUS_REVOKED),
        (STATUS_EXPIRED, STATUS_EXPIRED),
    )

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='abha_consents')
    purpose = models.CharField(max_length=64, blank=True, default='')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_REQUESTED, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"consent {self.purpose} ({self.status})"


class AbhaRecordLink(models.Model):
    """A care context shared (or queued for sharing) with the patient's ABHA."""

    UPLOAD_PENDING = 'pending'
    UPLOAD_UPLOADED = 'uploaded'
    UPLOAD_FAILED = 'failed'

    UPLOAD_CHOICES = (
        (UPLOAD_PENDING, UPLOAD_PENDING),
        (UPLOAD_UPLOADED, UPLOAD_UPLOADED),
        (UPLOAD_FAILED, UPLOAD_FAILED),
    )

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='abha_records')
    abha_number = models.CharField(max_length=32, blank=True, default='')
    record_type = models.CharField(max_length=64, blank=True, default='')
    care_context_reference = models.CharField(max_length=128, blank=True, default='')
    upload_status = models.CharField(max_length=10, choices=UPLOAD_CHOICES, default=UPLOAD_PENDING, db_index=True)
    uploaded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.record_type or 'record'} for patient {self.patient_id} ({self.upload_status})"


class AbhaMeta(models.Model):
    """Facility-wide ABHA settings, e.g. ``hfr_id``."""

    meta_key = models.CharField(max_length=100, unique=True)
    meta_value = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'ABHA setting'

    def __str__(self) -> str:
        return self.meta_key
