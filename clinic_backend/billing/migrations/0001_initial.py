import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


PAYMENT_CHOICES = [("pending", "pending"), ("partial", "partial"), ("paid", "paid")]


def money():
    return models.DecimalField(decimal_places=2, default=0, max_digits=10)


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
            name="Bill",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bill_number", models.CharField(db_index=True, max_length=32)),
                ("bill_date", models.DateField()),
                ("subtotal", money()),
                ("discount_amount", money()),
                ("tax_amount", money()),
                ("total_amount", money()),
                ("amount_paid", money()),
                ("balance_due", money()),
                ("payment_status", models.CharField(choices=PAYMENT_CHOICES, default="pending", max_length=10)),
                ("payment_method", models.CharField(blank=True, default="cash", max_length=32)),
                ("payment_reference", models.CharField(blank=True, default="", max_length=128)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bills",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "clinic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bills",
                        to="core.clinic",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_bills",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="doctor_bills",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bills",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="BillItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("service_name", models.CharField(default="Service", max_length=200)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", money()),
                ("discount", money()),
                ("tax", money()),
                ("total_price", money()),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "bill",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="billing.bill",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ReceiptTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("template_name", models.CharField(max_length=200)),
                ("header_content", models.TextField(blank=True, default="")),
                ("footer_content", models.TextField(blank=True, default="")),
                ("header_image", models.ImageField(blank=True, null=True, upload_to="receipt-templates/")),
                ("footer_image", models.ImageField(blank=True, null=True, upload_to="receipt-templates/")),
                ("is_default", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "clinic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="receipt_templates",
                        to="core.clinic",
                    ),
                ),
            ],
            options={
                "ordering": ["-is_default", "template_name", "id"],
            },
        ),
        migrations.CreateModel(
            name="SubscriptionPackage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "package_type",
                    models.CharField(
                        choices=[
                            ("treatment_plan", "treatment_plan"),
                            ("membership", "membership"),
                            ("wellness", "wellness"),
                        ],
                        default="treatment_plan",
                        max_length=20,
                    ),
                ),
                ("num_sessions", models.PositiveIntegerField()),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("validity_days", models.PositiveIntegerField()),
                (
                    "pricing_model",
                    models.CharField(
                        choices=[("advance", "advance"), ("per_session", "per_session")],
                        default="advance",
                        max_length=16,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "doctor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="subscription_packages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name", "id"],
            },
        ),
        migrations.CreateModel(
            name="PatientSubscription",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(db_index=True, max_length=32)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("sessions_total", models.PositiveIntegerField()),
                ("sessions_used", models.PositiveIntegerField(default=0)),
                ("last_session_at", models.DateTimeField(blank=True, null=True)),
                ("amount_paid", money()),
                ("amount_due", money()),
                ("payment_status", models.CharField(choices=PAYMENT_CHOICES, default="pending", max_length=10)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "active"),
                            ("expired", "expired"),
                            ("cancelled", "cancelled"),
                            ("completed", "completed"),
                        ],
                        db_index=True,
                        default="active",
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "package",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="subscriptions",
                        to="billing.subscriptionpackage",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="subscriptions",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="SubscriptionSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("used_at", models.DateTimeField(auto_now_add=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="subscription_sessions",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "recorded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "subscription",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sessions",
                        to="billing.patientsubscription",
                    ),
                ),
            ],
            options={
                "ordering": ["-used_at", "-id"],
            },
        ),
    ]
