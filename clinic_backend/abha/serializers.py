"""ABHA serializers. Flow responses are assembled in services."""

from rest_framework import serializers

from .models import AbhaRecordLink


class RegistrationInitSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(required=False, allow_null=True)
    aadhaar_number = serializers.CharField(error_messages={'required': 'aadhaar_number is required'})
    mobile_number = serializers.CharField(required=False, allow_blank=True, default='')


class OtpVerifySerializer(serializers.Serializer):
    session_id = serializers.CharField()
    otp = serializers.CharField()
    txn_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class LoginInitSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    abha_address = serializers.CharField()
    auth_method = serializers.CharField(required=False, default='aadhaar_otp')


class UnlinkSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(error_messages={'required': 'patient_id is required'})


class HfrIdSerializer(serializers.Serializer):
    hfr_id = serializers.CharField(max_length=64, error_messages={'required': 'hfr_id is required'})


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class AbhaRecordLinkSerializer(serializers.ModelSerializer):
    class Meta:
        model = AbhaRecordLink
        fields = [
            'id',
            'abha_number',
            'record_type',
            'care_context_reference',
            'upload_status',
            'uploaded_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
