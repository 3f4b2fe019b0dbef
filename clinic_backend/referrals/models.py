from django.conf import settings
from django.db import models


class ReferralDoctor(models.Model):
    """External specialist in a doctor's referral network."""

    name = models.CharField(max_length=200)
    specialization = models.CharField(max_length=128, blank=True, default='')
    hospital = models.CharField(max_length=200, blank=True, default='')
    hospital_address = models.TextField(blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    state = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    notes = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True, db_index=True)
    is_preferred = models.BooleanField(default=False)
    referral_count = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='referral_network',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-is_preferred', '-referral_count', 'name']

    def __str__(self) -> str:
        return f"{self.name} ({self.specialization})" if self.specialization else self.name


class PatientReferral(models.Model):
    PRIORITY_ROUTINE = 'routine'
    PRIORITY_URGENT = 'urgent'
    PRIORITY_EMERGENCY = 'emergency'
    PRIORITY_CHOICES = (
        (PRIORITY_ROUTINE, PRIORITY_ROUTINE),
        (PRIORITY_URGENT, PRIORITY_URGENT),
        (PRIORITY_EMERGENCY, PRIORITY_EMERGENCY),
    )

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_PENDING, STATUS_PENDING),
        (STATUS_ACCEPTED, STATUS_ACCEPTED),
        (STATUS_COMPLETED, STATUS_COMPLETED),
        (STATUS_CANCELLED, STATUS_CANCELLED),
    )

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='referrals')
    referred_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='referrals_made',
    )
    referred_to_doctor = models.ForeignKey(
        ReferralDoctor,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='referrals',
    )
    referred_doctor_name = models.CharField(max_length=200, blank=True, default='')
    referred_doctor_phone = models.CharField(max_length=20, blank=True, default='')
    referred_doctor_email = models.EmailField(blank=True, default='')
    specialty = models.CharField(max_length=128, blank=True, default='')
    hospital_name = models.CharField(max_length=200, blank=True, default='')

    referral_date = models.DateField(db_index=True)
    referral_time = models.TimeField(null=True, blank=True)
    reason = models.TextField(blank=True, default='')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_ROUTINE)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True, default='')
    outcome = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-referral_date', '-created_at', '-id']

    def __str__(self) -> str:
        return f"Referral #{self.id} patient_id={self.patient_id} -> {self.target_name}"

    @property
    def target_name(self) -> str:
        if self.referred_to_doctor_id:
            return self.referred_to_doctor.name
        return self.referred_doctor_name
