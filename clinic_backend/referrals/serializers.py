from rest_framework import serializers

from .models import PatientReferral, ReferralDoctor
from .services import NETWORK_UPDATE_FIELDS, REFERRAL_UPDATE_FIELDS


class ReferralDoctorSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReferralDoctor
        fields = ['id'] + list(NETWORK_UPDATE_FIELDS) + ['referral_count', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'referral_count', 'created_by', 'created_at', 'updated_at']


class PatientReferralSerializer(serializers.ModelSerializer):
    """Read serializer with patient and doctor names."""

    patient_name = serializers.CharField(source='patient.name', read_only=True)
    patient_uhid = serializers.CharField(source='patient.uhid', read_only=True)
    patient_phone = serializers.CharField(source='patient.phone', read_only=True)
    referring_doctor_name = serializers.SerializerMethodField()
    referred_to_doctor_name = serializers.CharField(source='target_name', read_only=True)
    referral_time = serializers.TimeField(format='%H:%M', read_only=True)

    class Meta:
        model = PatientReferral
        fields = [
            'id',
            'patient',
            'patient_name',
            'patient_uhid',
            'patient_phone',
            'referred_by',
            'referring_doctor_name',
            'referred_to_doctor',
            'referred_to_doctor_name',
            'referred_doctor_name',
            'referred_doctor_phone',
            'referred_doctor_email',
            'specialty',
            'hospital_name',
            'referral_date',
            'referral_time',
            'reason',
            'priority',
            'status',
            'notes',
            'outcome',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_referring_doctor_name(self, obj):
        return obj.referred_by.display_name if obj.referred_by_id else None


class PatientReferralCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    referral_date = serializers.DateField()
    referred_to_doctor_id = serializers.IntegerField(required=False, allow_null=True)
    referred_doctor_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    referred_doctor_phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    referred_doctor_email = serializers.EmailField(required=False, allow_blank=True)
    specialty = serializers.CharField(required=False, allow_blank=True, max_length=128)
    hospital_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    referral_time = serializers.TimeField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=PatientReferral.PRIORITY_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        if 'specialty' not in data and data.get('referred_doctor_specialization'):
            data = dict(data.items())
            data['specialty'] = data['referred_doctor_specialization']
        return super().to_internal_value(data)

    def validate(self, attrs):
        if not attrs.get('referred_to_doctor_id') and not attrs.get('referred_doctor_name'):
            raise serializers.ValidationError('Either referred doctor ID or name is required')
        return attrs


class PatientReferralUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PatientReferral
        fields = list(REFERRAL_UPDATE_FIELDS)
