from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Medicine(models.Model):
    """Medicine master; rows are created on first use in a prescription."""

    name = models.CharField(max_length=200, unique=True)
    generic_name = models.CharField(max_length=200, blank=True, default='')
    brand = models.CharField(max_length=200, blank=True, default='')
    form = models.CharField(max_length=64, blank=True, default='')
    strength = models.CharField(max_length=64, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class PrescriptionTemplate(models.Model):
    """Reusable prescription preset (symptoms, diagnoses and medications)."""

    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True, default='', db_index=True)
    description = models.TextField(blank=True, default='')
    symptoms = models.JSONField(default=list, blank=True)
    diagnoses = models.JSONField(default=list, blank=True)
    medications = models.JSONField(default=list, blank=True)
    investigations = models.TextField(blank=True, default='')
    precautions = models.TextField(blank=True, default='')
    diet_restrictions = models.TextField(blank=True, default='')
    activities = models.TextField(blank=True, default='')
    advice = models.TextField(blank=True, default='')
    follow_up_days = models.PositiveIntegerField(null=True, blank=True)
    duration_days = models.PositiveIntegerField(default=7)
    is_active = models.BooleanField(default=True, db_index=True)

    clinic = models.ForeignKey(
        'core.Clinic',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='prescription_templates',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['category', 'name', 'id']

    def __str__(self) -> str:
        return f"{self.category or '-'} / {self.name}"


class Prescription(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, STATUS_ACTIVE),
        (STATUS_CANCELLED, STATUS_CANCELLED),
    )

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='prescriptions')
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='prescriptions',
    )
    clinic = models.ForeignKey(
        'core.Clinic',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='prescriptions',
    )
    appointment = models.ForeignKey(
        'appointments.Appointment',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='prescriptions',
    )
    template = models.ForeignKey(
        PrescriptionTemplate,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='prescriptions',
    )

    chief_complaint = models.TextField(blank=True, default='')
    diagnosis = models.JSONField(default=list, blank=True)
    advice = models.TextField(blank=True, default='')
    patient_notes = models.TextField(blank=True, default='')
    private_notes = models.TextField(blank=True, default='')
    prescribed_date = models.DateField(db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['patient', 'created_at'], name='rx_patient_created_idx'),
        ]

    def __str__(self) -> str:
        return f"Prescription #{self.id} patient_id={self.patient_id}"


class PrescriptionItem(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='items')
    medicine = models.ForeignKey(
        Medicine,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='prescription_items',
    )
    medicine_name = models.CharField(max_length=200)
    dosage = models.CharField(max_length=100, blank=True, default='')
    frequency = models.CharField(max_length=100, blank=True, default='')
    duration = models.CharField(max_length=100, blank=True, default='')
    route = models.CharField(max_length=50, blank=True, default='')
    instructions = models.TextField(blank=True, default='')
    quantity = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self) -> str:
        return f"{self.medicine_name} {self.dosage}".strip()


class PrescriptionAllergyAlert(models.Model):
    """Drug/allergy match recorded when a prescription was saved."""

    ACTION_WARNED = 'warned'
    ACTION_BLOCKED = 'blocked'
    ACTION_CHOICES = (
        (ACTION_WARNED, ACTION_WARNED),
        (ACTION_BLOCKED, ACTION_BLOCKED),
    )

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='allergy_alerts')
    prescription = models.ForeignKey(
        Prescription,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='allergy_alerts',
    )
    drug_name = models.CharField(max_length=200)
    allergen_name = models.CharField(max_length=200)
    severity = models.CharField(max_length=10, blank=True, default='')
    action = models.CharField(max_length=10, choices=ACTION_CHOICES, default=ACTION_WARNED)
    message = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']


class VisitAdvice(models.Model):
    """Advice and follow-up date printed with a prescription."""

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='visit_advice')
    appointment = models.ForeignKey(
        'appointments.Appointment',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='visit_advice',
    )
    prescription = models.OneToOneField(
        Prescription,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='visit_advice',
    )
    advice = models.TextField(blank=True, default='')
    follow_up_days = models.PositiveIntegerField(null=True, blank=True)
    next_visit_date = models.DateField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['next_visit_date', 'id']
        verbose_name_plural = 'Visit advice'

    def __str__(self) -> str:
        return f"Advice #{self.id} next_visit={self.next_visit_date}"
