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
            name="QueueEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("queue_date", models.DateField(db_index=True)),
                ("token_number", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("waiting", "waiting"),
                            ("in_progress", "in_progress"),
                            ("completed", "completed"),
                            ("cancelled", "cancelled"),
                            ("no-show", "no-show"),
                        ],
                        db_index=True,
                        default="waiting",
                        max_length=16,
                    ),
                ),
                (
                    "visit_status",
                    models.CharField(
                        choices=[("unbilled", "unbilled"), ("with_staff", "with_staff"), ("billed", "billed")],
                        default="unbilled",
                        max_length=16,
                    ),
                ),
                (
                    "priority",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("chief_complaint", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.CharField(blank=True, default="", max_length=500)),
                ("check_in_time", models.DateTimeField(auto_now_add=True)),
                ("called_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="queue_entries",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "clinic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="queue_entries",
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
                (
                    "doctor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="queue_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="queue_entries",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Queue entries",
                "ordering": ["-priority", "token_number", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("doctor", "queue_date", "token_number"),
                        name="uniq_queue_doctor_date_token",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("doctor__isnull", True)),
                        fields=("queue_date", "token_number"),
                        name="uniq_queue_date_token_no_doctor",
                    ),
                ],
            },
        ),
    ]
