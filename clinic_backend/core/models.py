from django.contrib.auth.models import AbstractUser
from django.db import models
from django.conf import settings


class Role(models.Model):
    """User roles for RBAC (Role-Based Access Control).

    Standard roles: admin, doctor, assistant, reception, nurse, billing
    """

    name = models.CharField(max_length=64, unique=True, db_index=True)
    label = models.CharField(max_length=128)

    class Meta:
        db_table = 'core_role'
        ordering = ['name']
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self) -> str:
        return self.label


class Clinic(models.Model):
    """A clinic (facility) the staff belongs to.

    ``hfr_id`` is the Health Facility Registry id issued under ABDM.
    """

    name = models.CharField(max_length=200)
    address = models.TextField(blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    hfr_id = models.CharField(max_length=64, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'core_clinic'
        ordering = ['name', 'id']

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    """Custom User model with role-based access control.

    Extends Django's AbstractUser with:
    - role: ForeignKey to Role for RBAC
    - clinic: the clinic a staff member works at
    - specialization: shown on prescriptions and referral letters
    - email: Made unique (required for JWT auth)
    """

    email = models.EmailField('email address', blank=True, unique=True)
    calendar_color = models.CharField(max_length=7, blank=True, default='#1E90FF')
    phone = models.CharField(max_length=20, blank=True, default='')
    specialization = models.CharField(max_length=128, blank=True, default='')
    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='users',
    )
    clinic = models.ForeignKey(
        Clinic,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='staff',
    )

    class Meta:
        db_table = 'core_user'
        ordering = ['username']
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    @property
    def role_name(self):
        return getattr(self.role, 'name', None)

    @property
    def display_name(self) -> str:
        full_name = self.get_full_name().strip()
        if not full_name:
            return self.username
        if self.role_name == 'doctor':
            return f"Dr. {full_name}"
        return full_name


class AuditLog(models.Model):
    """Audit log for patient-related actions.

    Tracks who accessed/modified patient data and when.
    patient_id is kept as a plain integer so audit rows survive patient
    deletes and merges.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    role_name = models.CharField(max_length=50, db_index=True)
    action = models.CharField(max_length=50, db_index=True)
    patient_id = models.IntegerField(null=True, blank=True, db_index=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    meta = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'core_auditlog'
        ordering = ['-timestamp', '-id']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='auditlog_action_ts_idx'),
            models.Index(fields=['patient_id', 'timestamp'], name='auditlog_patient_ts_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.timestamp} {self.action} (patient_id={self.patient_id})"
