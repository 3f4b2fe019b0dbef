import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("appointments", "0001_initial"),
        ("core", "0001_initial"),
        ("patients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Medicine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
                ("generic_name", models.CharField(blank=True, default="", max_length=200)),
                ("brand", models.CharField(blank=True, default="", max_length=200)),
                ("form", models.CharField(blank=True, default="", max_length=64)),
                ("strength", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="PrescriptionTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("category", models.CharField(blank=True, db_index=True, default="", max_length=100)),
                ("description", models.TextField(blank=True, default="")),
                ("symptoms", models.JSONField(blank=True, default=list)),
                ("diagnoses", models.JSONField(blank=True, default=list)),
                ("medications", models.JSONField(blank=True, default=list)),
                ("investigations", models.TextField(blank=True, default="")),
                ("precautions", models.TextField(blank=True, default="")),
                ("diet_restrictions", models.TextField(blank=True, default="")),
                ("activities", models.TextField(blank=True, default="")),
                ("advice", models.TextField(blank=True, default="")),
                ("follow_up_days", models.PositiveIntegerField(blank=True, null=True)),
                ("duration_days", models.PositiveIntegerField(default=7)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "clinic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="prescription_templates",
                        to="core.clinic",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["category", "name", "id"],
            },
        ),
        migrations.CreateModel(
            name="Prescription",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("chief_complaint", models.TextField(blank=True, default="")),
                ("diagnosis", models.JSONField(blank=True, default=list)),
                ("advice", models.TextField(blank=True, default="")),
                ("patient_notes", models.TextField(blank=True, default="")),
                ("private_notes", models.TextField(blank=True, default="")),
                ("prescribed_date", models.DateField(db_index=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "active"), ("cancelled", "cancelled")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="prescriptions",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "clinic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="prescriptions",
                        to="core.clinic",
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="prescriptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="prescriptions",
                        to="patients.patient",
                    ),
                ),
                (
                    "template",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="prescriptions",
                        to="prescriptions.prescriptiontemplate",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["patient", "created_at"], name="rx_patient_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="PrescriptionItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("medicine_name", models.CharField(max_length=200)),
                ("dosage", models.CharField(blank=True, default="", max_length=100)),
                ("frequency", models.CharField(blank=True, default="", max_length=100)),
                ("duration", models.CharField(blank=True, default="", max_length=100)),
                ("route", models.CharField(blank=True, default="", max_length=50)),
                ("instructions", models.TextField(blank=True, default="")),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "medicine",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="prescription_items",
                        to="prescriptions.medicine",
                    ),
                ),
                (
                    "prescription",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="prescriptions.prescription",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="PrescriptionAllergyAlert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("drug_name", models.CharField(max_length=200)),
                ("allergen_name", models.CharField(max_length=200)),
                ("severity", models.CharField(blank=True, default="", max_length=10)),
                (
                    "action",
                    models.CharField(
                        choices=[("warned", "warned"), ("blocked", "blocked")],
                        default="warned",
                        max_length=10,
                    ),
                ),
                ("message", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="allergy_alerts",
                        to="patients.patient",
                    ),
                ),
                (
                    "prescription",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="allergy_alerts",
                        to="prescriptions.prescription",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="VisitAdvice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("advice", models.TextField(blank=True, default="")),
                ("follow_up_days", models.PositiveIntegerField(blank=True, null=True)),
                ("next_visit_date", models.DateField(blank=True, db_index=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="visit_advice",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visit_advice",
                        to="patients.patient",
                    ),
                ),
                (
                    "prescription",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visit_advice",
                        to="prescriptions.prescription",
                    ),
                ),
            ],
            options={
                "ordering": ["next_visit_date", "id"],
                "verbose_name_plural": "Visit advice",
            },
        ),
    ]
