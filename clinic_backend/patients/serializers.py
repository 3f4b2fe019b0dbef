from rest_framework import serializers

from clinic_backend.patients.models import (
    FamilyHistory,
    InsurancePolicy,
    MedicalRecord,
    Patient,
    PatientAllergy,
    Vitals,
)
from clinic_backend.patients.services import normalize_gender, normalize_relation


class PatientReadSerializer(serializers.ModelSerializer):
    """Read-only serializer with all fields."""

    age = serializers.IntegerField(source='current_age', read_only=True)
    has_abha = serializers.BooleanField(read_only=True)

    class Meta:
        model = Patient
        fields = [
            'id',
            'uhid',
            'name',
            'gender',
            'date_of_birth',
            'age',
            'blood_group',
            'phone',
            'email',
            'address',
            'city',
            'state',
            'district',
            'pincode',
            'priority',
            'is_vip',
            'vip_tier',
            'abha_number',
            'abha_address',
            'health_id',
            'has_abha',
            'clinic',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PatientWriteSerializer(serializers.ModelSerializer):
    """Write serializer for create/update operations."""

    uhid = serializers.CharField(max_length=32, required=False, allow_blank=True)
    gender = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Patient
        fields = [
            'uhid',
            'name',
            'gender',
            'date_of_birth',
            'age',
            'blood_group',
            'phone',
            'email',
            'address',
            'city',
            'state',
            'district',
            'pincode',
            'priority',
            'is_vip',
            'vip_tier',
            'clinic',
        ]
        extra_kwargs = {
            'name': {'required': True, 'allow_blank': False},
            'priority': {'min_value': 0, 'max_value': 5},
        }

    def validate_name(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Name is required.')
        return value

    def validate_gender(self, value):
        return normalize_gender(value)


class PatientMergeSerializer(serializers.Serializer):
    primary_patient_id = serializers.IntegerField(min_value=1)
    patient_ids_to_merge = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )


class PatientAllergySerializer(serializers.ModelSerializer):
    class Meta:
        model = PatientAllergy
        fields = ['id', 'patient', 'category', 'allergen_name', 'reaction', 'severity', 'is_active', 'created_at']
        read_only_fields = ['id', 'patient', 'created_at']


class FamilyHistorySerializer(serializers.ModelSerializer):
    relation = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = FamilyHistory
        fields = ['id', 'patient', 'relation', 'condition', 'notes', 'created_at']
        read_only_fields = ['id', 'patient', 'created_at']

    def validate_relation(self, value):
        return normalize_relation(value)


class VitalsSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vitals
        fields = [
            'id',
            'patient',
            'temperature',
            'pulse',
            'bp_systolic',
            'bp_diastolic',
            'respiratory_rate',
            'spo2',
            'weight',
            'height',
            'bmi',
            'recorded_by',
            'recorded_at',
        ]
        read_only_fields = ['id', 'patient', 'bmi', 'recorded_by', 'recorded_at']


class MedicalRecordSerializer(serializers.ModelSerializer):
    file_url = serializers.SerializerMethodField()

    class Meta:
        model = MedicalRecord
        fields = [
            'id',
            'patient',
            'record_type',
            'original_name',
            'mime_type',
            'file_size',
            'description',
            'file_url',
            'uploaded_by',
            'uploaded_at',
        ]
        read_only_fields = fields

    def get_file_url(self, obj):
        if not obj.file:
            return None
        request = self.context.get('request')
        url = obj.file.url
        return request.build_absolute_uri(url) if request is not None else url


class MedicalRecordUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    record_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class InsurancePolicySerializer(serializers.ModelSerializer):
    class Meta:
        model = InsurancePolicy
        fields = ['id', 'patient', 'provider', 'policy_number', 'coverage_details', 'valid_till', 'created_at', 'updated_at']
        read_only_fields = ['id', 'patient', 'created_at', 'updated_at']
