from django.utils import timezone

from rest_framework import serializers

from .models import QueueEntry
from .services import is_bp_abnormal, wait_minutes


class QueueEntrySerializer(serializers.ModelSerializer):
    """Queue row with the patient details the front desk needs."""

    patient_name = serializers.CharField(source='patient.name', read_only=True)
    patient_uhid = serializers.CharField(source='patient.uhid', read_only=True)
    age = serializers.IntegerField(source='patient.current_age', read_only=True)
    gender = serializers.CharField(source='patient.gender', read_only=True)
    phone = serializers.CharField(source='patient.phone', read_only=True)
    email = serializers.CharField(source='patient.email', read_only=True)
    is_vip = serializers.BooleanField(source='patient.is_vip', read_only=True)
    vip_tier = serializers.CharField(source='patient.vip_tier', read_only=True)
    doctor_name = serializers.SerializerMethodField()
    wait_time_minutes = serializers.SerializerMethodField()
    bp_alert = serializers.SerializerMethodField()

    class Meta:
        model = QueueEntry
        fields = [
            'id',
            'token_number',
            'queue_date',
            'patient',
            'patient_name',
            'patient_uhid',
            'age',
            'gender',
            'phone',
            'email',
            'is_vip',
            'vip_tier',
            'doctor',
            'doctor_name',
            'appointment',
            'status',
            'visit_status',
            'priority',
            'chief_complaint',
            'notes',
            'check_in_time',
            'called_at',
            'completed_at',
            'wait_time_minutes',
            'bp_alert',
        ]
        read_only_fields = fields

    def get_doctor_name(self, obj):
        return obj.doctor.display_name if obj.doctor_id else None

    def get_wait_time_minutes(self, obj):
        return wait_minutes(obj)

    def get_bp_alert(self, obj):
        vitals = (
            obj.patient.vitals.filter(recorded_at__date=timezone.localdate())
            .exclude(bp_systolic__isnull=True, bp_diastolic__isnull=True)
            .first()
        )
        if vitals is None:
            return False
        return is_bp_abnormal(vitals.bp_systolic, vitals.bp_diastolic)


class QueueAddSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    doctor_id = serializers.IntegerField(required=False, allow_null=True)
    appointment_id = serializers.IntegerField(required=False, allow_null=True)
    priority = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=5)
    chief_complaint = serializers.CharField(required=False, allow_blank=True, max_length=255, default='')
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500, default='')


class QueueStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    skip_billing = serializers.BooleanField(required=False, allow_null=True)
