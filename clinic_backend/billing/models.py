"""Bills, receipt templates and subscription packages."""

from django.conf import settings
from django.db import models


PAYMENT_PENDING = 'pending'
PAYMENT_PARTIAL = 'partial'
PAYMENT_PAID = 'paid'

PAYMENT_STATUS_CHOICES = (
    (PAYMENT_PENDING, PAYMENT_PENDING),
    (PAYMENT_PARTIAL, PAYMENT_PARTIAL),
    (PAYMENT_PAID, PAYMENT_PAID),
)


def _money(**kwargs):
    return models.DecimalField(max_digits=10, decimal_places=2, default=0, **kwargs)


class Bill(models.Model):
    """A receipt for a patient, optionally tied to an appointment."""

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='bills')
    appointment = models.ForeignKey(
        'appointments.Appointment',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='bills',
    )
    clinic = models.ForeignKey('core.Clinic', null=True, blank=True, on_delete=models.SET_NULL, related_name='bills')
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='doctor_bills',
    )
    bill_number = models.CharField(max_length=32, db_index=True)
    bill_date = models.DateField()
    subtotal = _money()
    discount_amount = _money()
    tax_amount = _money()
    total_amount = _money()
    amount_paid = _money()
    balance_due = _money()
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)
    payment_method = models.CharField(max_length=32, blank=True, default='cash')
    payment_reference = models.CharField(max_length=128, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='created_bills',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f'{self.bill_number} ({self.payment_status})'


class BillItem(models.Model):
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='items')
    service_name = models.CharField(max_length=200, default='Service')
    quantity = models.PositiveIntegerField(default=1)
    unit_price = _money()
    discount = _money()
    tax = _money()
    total_price = _money()
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self) -> str:
        return f'{self.service_name} x{self.quantity}'


class ReceiptTemplate(models.Model):
    """Header/footer layout printed on receipts of a clinic."""

    clinic = models.ForeignKey(
        'core.Clinic',
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='receipt_templates',
    )
    template_name = models.CharField(max_length=200)
    header_content = models.TextField(blank=True, default='')
    footer_content = models.TextField(blank=True, default='')
    header_image = models.ImageField(upload_to='receipt-templates/', null=True, blank=True)
    footer_image = models.ImageField(upload_to='receipt-templates/', null=True, blank=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-is_default', 'template_name', 'id']

    def __str__(self) -> str:
        return self.template_name


class SubscriptionPackage(models.Model):
    """Prepaid bundle of sessions (treatment plan, membership, wellness)."""

    TYPE_TREATMENT_PLAN = 'treatment_plan'
    TYPE_MEMBERSHIP = 'membership'
    TYPE_WELLNESS = 'wellness'
    TYPE_CHOICES = (
        (TYPE_TREATMENT_PLAN, TYPE_TREATMENT_PLAN),
        (TYPE_MEMBERSHIP, TYPE_MEMBERSHIP),
        (TYPE_WELLNESS, TYPE_WELLNESS),
    )

    PRICING_ADVANCE = 'advance'
    PRICING_PER_SESSION = 'per_session'
    PRICING_CHOICES = (
        (PRICING_ADVANCE, PRICING_ADVANCE),
        (PRICING_PER_SESSION, PRICING_PER_SESSION),
    )

    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='subscription_packages',
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    package_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_TREATMENT_PLAN)
    num_sessions = models.PositiveIntegerField()
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    validity_days = models.PositiveIntegerField()
    pricing_model = models.CharField(max_length=16, choices=PRICING_CHOICES, default=PRICING_ADVANCE)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name', 'id']

    def __str__(self) -> str:
        return self.name


class PatientSubscription(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_EXPIRED = 'expired'
    STATUS_CANCELLED = 'cancelled'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, STATUS_ACTIVE),
        (STATUS_EXPIRED, STATUS_EXPIRED),
        (STATUS_CANCELLED, STATUS_CANCELLED),
        (STATUS_COMPLETED, STATUS_COMPLETED),
    )

    code = models.CharField(max_length=32, db_index=True)
    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='subscriptions')
    package = models.ForeignKey(SubscriptionPackage, on_delete=models.PROTECT, related_name='subscriptions')
    start_date = models.DateField()
    end_date = models.DateField()
    sessions_total = models.PositiveIntegerField()
    sessions_used = models.PositiveIntegerField(default=0)
    last_session_at = models.DateTimeField(null=True, blank=True)
    amount_paid = _money()
    amount_due = _money()
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f'{self.code} ({self.sessions_used}/{self.sessions_total})'

    @property
    def sessions_remaining(self) -> int:
        return max(0, self.sessions_total - self.sessions_used)


class SubscriptionSession(models.Model):
    """One consumed session of a subscription."""

    subscription = models.ForeignKey(PatientSubscription, on_delete=models.CASCADE, related_name='sessions')
    appointment = models.ForeignKey(
        'appointments.Appointment',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='subscription_sessions',
    )
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
    )
    used_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-used_at', '-id']
