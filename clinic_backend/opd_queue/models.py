from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class QueueEntry(models.Model):
    """A patient waiting for a doctor on a given day.

    ``token_number`` is one clinic-wide sequence that restarts every day.
    """

    STATUS_WAITING = 'waiting'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no-show'

    STATUS_CHOICES = (
        (STATUS_WAITING, STATUS_WAITING),
        (STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
        (STATUS_COMPLETED, STATUS_COMPLETED),
        (STATUS_CANCELLED, STATUS_CANCELLED),
        (STATUS_NO_SHOW, STATUS_NO_SHOW),
    )
    ACTIVE_STATUSES = (STATUS_WAITING, STATUS_IN_PROGRESS)

    VISIT_UNBILLED = 'unbilled'
    VISIT_WITH_STAFF = 'with_staff'
    VISIT_BILLED = 'billed'

    VISIT_STATUS_CHOICES = (
        (VISIT_UNBILLED, VISIT_UNBILLED),
        (VISIT_WITH_STAFF, VISIT_WITH_STAFF),
        (VISIT_BILLED, VISIT_BILLED),
    )

    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='queue_entries')
    appointment = models.ForeignKey(
        'appointments.Appointment',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='queue_entries',
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='queue_entries',
    )
    clinic = models.ForeignKey(
        'core.Clinic',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='queue_entries',
    )
    queue_date = models.DateField(db_index=True)
    token_number = models.PositiveIntegerField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    visit_status = models.CharField(max_length=16, choices=VISIT_STATUS_CHOICES, default=VISIT_UNBILLED)
    priority = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    chief_complaint = models.CharField(max_length=255, blank=True, default='')
    notes = models.CharField(max_length=500, blank=True, default='')
    check_in_time = models.DateTimeField(auto_now_add=True)
    called_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
    )

    class Meta:
        ordering = ['-priority', 'token_number', 'id']
        verbose_name_plural = 'Queue entries'
        constraints = [
            models.UniqueConstraint(fields=['queue_date', 'token_number'], name='uniq_queue_date_token'),
        ]

    def __str__(self) -> str:
        return f'Token {self.token_number} on {self.queue_date} (patient_id={self.patient_id})'


class QueueTokenCounter(models.Model):
    """Last token handed out on ``queue_date``; locked while assigning the next one."""

    queue_date = models.DateField(unique=True)
    last_token = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:
        return f'{self.queue_date}: {self.last_token}'
