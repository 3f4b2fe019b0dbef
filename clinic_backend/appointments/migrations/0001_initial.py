import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("patients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("appointment_date", models.DateField(db_index=True)),
                ("appointment_time", models.TimeField()),
                (
                    "arrival_type",
                    models.CharField(
                        choices=[("walk-in", "walk-in"), ("online", "online"), ("referral", "referral")],
                        default="walk-in",
                        max_length=16,
                    ),
                ),
                ("reason_for_visit", models.TextField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "scheduled"),
                            ("checked-in", "checked-in"),
                            ("in-progress", "in-progress"),
                            ("completed", "completed"),
                            ("cancelled", "cancelled"),
                            ("no-show", "no-show"),
                        ],
                        db_index=True,
                        default="scheduled",
                        max_length=16,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "pending"), ("partial", "partial"), ("paid", "paid")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("visit_started_at", models.DateTimeField(blank=True, null=True)),
                ("visit_ended_at", models.DateTimeField(blank=True, null=True)),
                ("waiting_time_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("actual_duration_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "clinic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="appointments",
                        to="core.clinic",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_appointments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="appointments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="appointments",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "ordering": ["appointment_date", "appointment_time", "id"],
                "indexes": [
                    models.Index(fields=["doctor", "appointment_date"], name="appt_doctor_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AppointmentStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(blank=True, default="", max_length=16)),
                ("to_status", models.CharField(max_length=16)),
                ("notes", models.TextField(blank=True, default="")),
                ("changed_at", models.DateTimeField(auto_now_add=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "changed_by",
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
                "verbose_name_plural": "Appointment status history",
                "ordering": ["changed_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="DoctorTimeSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slot_time", models.TimeField()),
                (
                    "appointment_type",
                    models.CharField(
                        choices=[("offline", "offline"), ("online", "online"), ("both", "both")],
                        default="both",
                        max_length=8,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_slots",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["doctor_id", "display_order", "slot_time", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("doctor", "slot_time", "appointment_type"),
                        name="uniq_doctor_slot_time_type",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DoctorAvailability",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day_of_week", models.PositiveSmallIntegerField()),
                ("is_available", models.BooleanField(default=True)),
                ("start_time", models.TimeField(blank=True, null=True)),
                ("end_time", models.TimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Doctor availability",
                "ordering": ["doctor_id", "day_of_week"],
                "constraints": [
                    models.UniqueConstraint(fields=("doctor", "day_of_week"), name="uniq_doctor_day_of_week"),
                ],
            },
        ),
    ]
