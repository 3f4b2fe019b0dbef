"""Patient master data and per-patient clinical records."""

from datetime import date

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Patient(models.Model):
    """Patient master record.

    ``uhid`` is the clinic-issued Unique Hospital ID. The ABHA fields are
    filled once the patient's national health account is linked.
    """

    GENDER_MALE = 'M'
    GENDER_FEMALE = 'F'
    GENDER_OTHER = 'O'
    GENDER_UNKNOWN = 'U'

    GENDER_CHOICES = (
        (GENDER_MALE, 'Male'),
        (GENDER_FEMALE, 'Female'),
        (GENDER_OTHER, 'Other'),
        (GENDER_UNKNOWN, 'Unknown'),
    )

    uhid = models.CharField(max_length=32, unique=True, db_index=True)
    name = models.CharField(max_length=200)
    gender = models.CharField(max_length=1, choices=GENDER_CHOICES, default=GENDER_UNKNOWN)
    date_of_birth = models.DateField(null=True, blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    blood_group = models.CharField(max_length=5, blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='', db_index=True)
    email = models.EmailField(blank=True, default='')
    address = models.TextField(blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    state = models.CharField(max_length=100, blank=True, default='')
    district = models.CharField(max_length=100, blank=True, default='')
    pincode = models.CharField(max_length=10, blank=True, default='')

    priority = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    is_vip = models.BooleanField(default=False)
    vip_tier = models.CharField(max_length=32, blank=True, default='')

    abha_number = models.CharField(max_length=32, blank=True, default='', db_index=True)
    abha_address = models.CharField(max_length=128, blank=True, default='')
    health_id = models.CharField(max_length=128, blank=True, default='')

    clinic = models.ForeignKey(
        'core.Clinic',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='patients',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='created_patients',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.name} ({self.uhid})"

    @property
    def current_age(self):
        if self.date_of_birth is None:
            return self.age
        today = date.today()
        dob = self.date_of_birth
        return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))

    @property
    def has_abha(self) -> bool:
        return bool(self.abha_number)


class PatientAllergy(models.Model):
    CATEGORY_DRUG = 'drug'
    CATEGORY_FOOD = 'food'
    CATEGORY_ENVIRONMENT = 'environment'
    CATEGORY_OTHER = 'other'

    CATEGORY_CHOICES = (
        (CATEGORY_DRUG, CATEGORY_DRUG),
        (CATEGORY_FOOD, CATEGORY_FOOD),
        (CATEGORY_ENVIRONMENT, CATEGORY_ENVIRONMENT),
        (CATEGORY_OTHER, CATEGORY_OTHER),
    )

    SEVERITY_CHOICES = (
        ('mild', 'mild'),
        ('moderate', 'moderate'),
        ('severe', 'severe'),
    )

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='allergies')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_DRUG)
    allergen_name = models.CharField(max_length=200)
    reaction = models.CharField(max_length=255, blank=True, default='')
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='moderate')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['allergen_name', 'id']
        verbose_name_plural = 'Patient allergies'

    def __str__(self) -> str:
        return f"{self.allergen_name} ({self.severity})"


class FamilyHistory(models.Model):
    RELATIONS = ('father', 'mother', 'brother', 'sister', 'grandparent', 'child', 'other')
    RELATION_CHOICES = tuple((r, r) for r in RELATIONS)

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='family_history')
    relation = models.CharField(max_length=20, choices=RELATION_CHOICES, default='other')
    condition = models.CharField(max_length=255)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['relation', 'id']
        verbose_name_plural = 'Family history'

    def __str__(self) -> str:
        return f"{self.relation}: {self.condition}"


class Vitals(models.Model):
    """Vital signs captured at a visit. ``bmi`` is derived on save."""

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='vitals')
    temperature = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    pulse = models.PositiveIntegerField(null=True, blank=True)
    bp_systolic = models.PositiveIntegerField(null=True, blank=True)
    bp_diastolic = models.PositiveIntegerField(null=True, blank=True)
    respiratory_rate = models.PositiveIntegerField(null=True, blank=True)
    spo2 = models.PositiveIntegerField(null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    height = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    bmi = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='recorded_vitals',
    )
    recorded_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-recorded_at', '-id']
        verbose_name_plural = 'Vitals'

    def save(self, *args, **kwargs):
        from clinic_backend.patients.services import compute_bmi

        self.bmi = compute_bmi(self.weight, self.height)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Vitals #{self.id} patient_id={self.patient_id}"


def medical_record_upload_to(instance, filename):
    return f"medical_records/{instance.patient_id}/{filename}"


class MedicalRecord(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_records')
    record_type = models.CharField(max_length=50, default='general')
    file = models.FileField(upload_to=medical_record_upload_to, max_length=255)
    original_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100)
    file_size = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True, default='')
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='uploaded_records',
    )
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at', '-id']

    def __str__(self) -> str:
        return self.original_name


class InsurancePolicy(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='insurance_policies')
    provider = models.CharField(max_length=200)
    policy_number = models.CharField(max_length=100)
    coverage_details = models.TextField(blank=True, default='')
    valid_till = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'Insurance policies'

    def __str__(self) -> str:
        return f"{self.provider} {self.policy_number}"
