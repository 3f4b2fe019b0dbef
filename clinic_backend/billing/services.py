"""Billing business logic.

- Bill creation with item normalization and automatic payment status
- Payment updates that sync the appointment and today's queue entry
- Receipt template defaults
- Subscription enrollment and session usage
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from clinic_backend.appointments.models import Appointment
from clinic_backend.core.exceptions import Conflict, InvalidRequest, NotFound
from clinic_backend.core.utils import log_patient_action
from clinic_backend.opd_queue.models import QueueEntry

from .models import (
    PAYMENT_PAID,
    PAYMENT_PARTIAL,
    PAYMENT_PENDING,
    PAYMENT_STATUS_CHOICES,
    Bill,
    BillItem,
    PatientSubscription,
    ReceiptTemplate,
    SubscriptionSession,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


def to_decimal(value, default=ZERO) -> Decimal:
    if value in (None, ''):
        return default
    try:
        return Decimal(str(value)).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise InvalidRequest(f'Invalid amount: {value}')


def payment_status_for(total: Decimal, paid: Decimal) -> str:
    if total > 0 and paid >= total:
        return PAYMENT_PAID
    if paid > 0:
        return PAYMENT_PARTIAL
    return PAYMENT_PENDING


def generate_bill_number() -> str:
    return f'BILL{int(time.time() * 1000)}'


def normalize_items(items) -> list[dict]:
    """Map loosely shaped line items onto ``BillItem`` fields.

    ``total_price`` = quantity * unit_price - discount + tax.
    """
    if items in (None, ''):
        return []
    if not isinstance(items, list):
        raise InvalidRequest('items must be an array')

    normalized = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidRequest(f'Invalid item {index + 1}')
        try:
            quantity = int(item.get('quantity') or item.get('qty') or 1)
        except (TypeError, ValueError):
            raise InvalidRequest(f'Invalid quantity for item {index + 1}')
        unit_price = to_decimal(item.get('unit_price', item.get('price', item.get('amount'))))
        discount = to_decimal(item.get('discount', item.get('discount_amount')))
        tax = to_decimal(item.get('tax', item.get('tax_amount')))
        normalized.append({
            'service_name': item.get('service_name') or item.get('service') or item.get('name') or 'Service',
            'quantity': quantity,
            'unit_price': unit_price,
            'discount': discount,
            'tax': tax,
            'total_price': (unit_price * quantity - discount + tax).quantize(CENT),
            'sort_order': index + 1,
        })
    return normalized


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------


def create_bill(*, patient, appointment=None, items=None, user=None, **fields) -> Bill:
    duplicate = Bill.objects.filter(patient=patient)
    if appointment is not None:
        duplicate = duplicate.filter(appointment=appointment)
    existing = duplicate.order_by('-created_at', '-id').first()
    if existing is not None:
        raise Conflict('Bill already exists for this appointment', existing_bill_id=existing.pk)

    rows = normalize_items(items)
    subtotal = sum((row['total_price'] for row in rows), ZERO)
    if not rows:
        subtotal = to_decimal(fields.get('subtotal'))
    discount = to_decimal(fields.get('discount_amount'))
    tax = to_decimal(fields.get('tax_amount'))
    total = to_decimal(fields.get('total_amount'), default=None)
    if total is None:
        total = max(ZERO, subtotal - discount + tax)
    paid = to_decimal(fields.get('amount_paid'))

    with transaction.atomic():
        bill = Bill.objects.create(
            patient=patient,
            appointment=appointment,
            clinic=fields.get('clinic') or getattr(user, 'clinic', None),
            doctor=fields.get('doctor') or getattr(appointment, 'doctor', None),
            bill_number=fields.get('bill_number') or generate_bill_number(),
            bill_date=fields.get('bill_date') or timezone.localdate(),
            subtotal=subtotal,
            discount_amount=discount,
            tax_amount=tax,
            total_amount=total,
            amount_paid=paid,
            balance_due=max(ZERO, total - paid),
            payment_status=payment_status_for(total, paid),
            payment_method=fields.get('payment_method') or 'cash',
            payment_reference=fields.get('payment_reference') or '',
            notes=fields.get('notes') or '',
            created_by=user if getattr(user, 'is_authenticated', False) else None,
        )
        BillItem.objects.bulk_create([BillItem(bill=bill, **row) for row in rows])
        sync_bill_status(bill)

    log_patient_action(user, 'bill_create', patient_id=patient.pk, meta={'bill_id': bill.pk})
    return bill


def update_payment(bill: Bill, *, amount_paid=None, payment_status=None, user=None, **fields) -> Bill:
    """Record a payment on ``bill``.

    With ``amount_paid`` the status is derived from the amounts; an explicit
    ``payment_status`` alone overrides it.
    """
    with transaction.atomic():
        if amount_paid is not None:
            bill.amount_paid = to_decimal(amount_paid)
            bill.balance_due = max(ZERO, bill.total_amount - bill.amount_paid)
            bill.payment_status = payment_status_for(bill.total_amount, bill.amount_paid)
        elif payment_status is not None:
            _check_payment_status(payment_status)
            bill.payment_status = payment_status
            if payment_status == PAYMENT_PAID:
                bill.amount_paid = bill.total_amount
                bill.balance_due = ZERO

        for name in ('payment_method', 'payment_reference', 'notes'):
            if fields.get(name) is not None:
                setattr(bill, name, fields[name])
        bill.save()
        sync_bill_status(bill)

    log_patient_action(
        user,
        'bill_payment_update',
        patient_id=bill.patient_id,
        meta={'bill_id': bill.pk, 'payment_status': bill.payment_status},
    )
    return bill


def _check_payment_status(value):
    valid = [choice for choice, _label in PAYMENT_STATUS_CHOICES]
    if value not in valid:
        raise InvalidRequest(f"Invalid payment status. Must be one of: {', '.join(valid)}")


def sync_bill_status(bill: Bill):
    """Push the bill's payment status to its appointment and today's queue entry."""
    if bill.appointment_id:
        Appointment.objects.filter(pk=bill.appointment_id).update(payment_status=bill.payment_status)

    if bill.payment_status != PAYMENT_PAID:
        return

    entries = QueueEntry.objects.filter(patient_id=bill.patient_id, queue_date=timezone.localdate())
    if bill.appointment_id:
        entries = entries.filter(Q(appointment_id=bill.appointment_id) | Q(appointment__isnull=True))
    now = timezone.now()
    for entry in entries.exclude(status__in=[QueueEntry.STATUS_CANCELLED, QueueEntry.STATUS_NO_SHOW]):
        entry.status = QueueEntry.STATUS_COMPLETED
        entry.visit_status = QueueEntry.VISIT_BILLED
        entry.completed_at = entry.completed_at or now
        entry.save(update_fields=['status', 'visit_status', 'completed_at'])
        logger.info('Queue entry %s billed (bill %s)', entry.pk, bill.pk)


def update_appointment_payment_status(appointment, payment_status, *, user=None) -> Bill:
    """Set the payment status of the bill behind ``appointment``.

    Falls back to a bill created today for the same patient. Without any
    bill a ``NO_BILL_FOUND`` 404 is raised.
    """
    _check_payment_status(payment_status)
    bill = appointment.bills.order_by('-created_at', '-id').first()
    if bill is None:
        bill = (
            Bill.objects.filter(patient_id=appointment.patient_id, created_at__date=timezone.localdate())
            .order_by('-created_at', '-id')
            .first()
        )
    if bill is None:
        raise NotFound(
            'No bill found for this appointment. Please create a receipt first.',
            code='NO_BILL_FOUND',
        )
    if bill.appointment_id is None:
        bill.appointment = appointment
        bill.save(update_fields=['appointment', 'updated_at'])
    return update_payment(bill, payment_status=payment_status, user=user)


# ---------------------------------------------------------------------------
# Receipt templates
# ---------------------------------------------------------------------------


def make_default_template(template: ReceiptTemplate):
    with transaction.atomic():
        ReceiptTemplate.objects.filter(clinic_id=template.clinic_id, is_default=True).exclude(
            pk=template.pk
        ).update(is_default=False)
        if not template.is_default:
            template.is_default = True
            template.save(update_fields=['is_default', 'updated_at'])


def default_template_for(clinic_id) -> ReceiptTemplate:
    if not clinic_id:
        raise InvalidRequest('clinic_id is required')
    template = ReceiptTemplate.objects.filter(clinic_id=clinic_id, is_default=True).first()
    if template is None:
        raise NotFound('No default receipt template found')
    return template


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


def subscription_code(patient_id: int, package_id: int, year: int | None = None) -> str:
    year = year or timezone.localdate().year
    return f'SUB{year}{patient_id:05d}{package_id:03d}'


def enroll_patient(*, patient, package, start_date, amount_paid=None, notes='', user=None) -> PatientSubscription:
    if not package.is_active:
        raise InvalidRequest('Package is not active')
    paid = to_decimal(amount_paid)
    subscription = PatientSubscription.objects.create(
        code=subscription_code(patient.pk, package.pk, start_date.year),
        patient=patient,
        package=package,
        start_date=start_date,
        end_date=start_date + timedelta(days=package.validity_days),
        sessions_total=package.num_sessions,
        amount_paid=paid,
        amount_due=max(ZERO, package.total_price - paid),
        payment_status=payment_status_for(package.total_price, paid),
        notes=notes or '',
    )
    log_patient_action(user, 'subscription_enroll', patient_id=patient.pk, meta={'subscription_id': subscription.pk})
    return subscription


def use_session(subscription: PatientSubscription, *, appointment=None, user=None) -> PatientSubscription:
    """Consume one session; the last one completes the subscription."""
    with transaction.atomic():
        subscription = PatientSubscription.objects.select_for_update().get(pk=subscription.pk)
        today = timezone.localdate()
        if subscription.status != PatientSubscription.STATUS_ACTIVE or subscription.end_date < today:
            raise InvalidRequest('Subscription is not active or has expired')
        if subscription.sessions_used >= subscription.sessions_total:
            raise InvalidRequest('No sessions remaining in this subscription')

        subscription.sessions_used += 1
        subscription.last_session_at = timezone.now()
        if subscription.sessions_used >= subscription.sessions_total:
            subscription.status = PatientSubscription.STATUS_COMPLETED
        subscription.save(update_fields=['sessions_used', 'last_session_at', 'status', 'updated_at'])
        SubscriptionSession.objects.create(
            subscription=subscription,
            appointment=appointment,
            recorded_by=user if getattr(user, 'is_authenticated', False) else None,
        )

    log_patient_action(
        user,
        'subscription_session_used',
        patient_id=subscription.patient_id,
        meta={'subscription_id': subscription.pk, 'sessions_used': subscription.sessions_used},
    )
    return subscription


def consume_subscription_session(*, patient, doctor=None, appointment=None, user=None):
    """Use one session of the patient's active subscription for ``doctor``.

    Returns the subscription, or None when the patient has none that applies.
    """
    today = timezone.localdate()
    candidates = PatientSubscription.objects.filter(
        patient=patient,
        status=PatientSubscription.STATUS_ACTIVE,
        end_date__gte=today,
    ).filter(Q(package__doctor__isnull=True) | Q(package__doctor=doctor))
    for subscription in candidates.order_by('end_date', 'id'):
        if subscription.sessions_used < subscription.sessions_total:
            return use_session(subscription, appointment=appointment, user=user)
    return None
