from rest_framework import serializers

from .models import (
    PAYMENT_STATUS_CHOICES,
    Bill,
    BillItem,
    PatientSubscription,
    ReceiptTemplate,
    SubscriptionPackage,
)


class BillItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillItem
        fields = ['id', 'service_name', 'quantity', 'unit_price', 'discount', 'tax', 'total_price', 'sort_order']
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    """Read serializer including line items and patient summary."""

    items = BillItemSerializer(many=True, read_only=True)
    patient_name = serializers.CharField(source='patient.name', read_only=True)
    patient_uhid = serializers.CharField(source='patient.uhid', read_only=True)

    class Meta:
        model = Bill
        fields = [
            'id',
            'bill_number',
            'bill_date',
            'patient',
            'patient_name',
            'patient_uhid',
            'appointment',
            'clinic',
            'doctor',
            'subtotal',
            'discount_amount',
            'tax_amount',
            'total_amount',
            'amount_paid',
            'balance_due',
            'payment_status',
            'payment_method',
            'payment_reference',
            'notes',
            'items',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BillItemInputSerializer(serializers.Serializer):
    """One incoming line item. Accepts the short aliases the billing screen sends."""

    service_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    service = serializers.CharField(required=False, allow_blank=True, max_length=200)
    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    quantity = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    qty = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    tax = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    tax_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)


class BillCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    appointment_id = serializers.IntegerField(required=False, allow_null=True)
    bill_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    bill_date = serializers.DateField(required=False, allow_null=True)
    items = BillItemInputSerializer(many=True, required=False)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    tax_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    payment_method = serializers.CharField(required=False, allow_blank=True)
    payment_reference = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class BillPaymentSerializer(serializers.Serializer):
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    payment_status = serializers.ChoiceField(choices=PAYMENT_STATUS_CHOICES, required=False)
    payment_method = serializers.CharField(required=False, allow_blank=True)
    payment_reference = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.CharField()


class ReceiptTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReceiptTemplate
        fields = [
            'id',
            'clinic',
            'template_name',
            'header_content',
            'footer_content',
            'header_image',
            'footer_image',
            'is_default',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'template_name': {'required': True, 'allow_blank': False},
        }


class SubscriptionPackageSerializer(serializers.ModelSerializer):
    doctor_name = serializers.SerializerMethodField()

    class Meta:
        model = SubscriptionPackage
        fields = [
            'id',
            'doctor',
            'doctor_name',
            'name',
            'description',
            'package_type',
            'num_sessions',
            'total_price',
            'validity_days',
            'pricing_model',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'doctor_name', 'created_at', 'updated_at']

    def get_doctor_name(self, obj):
        return obj.doctor.display_name if obj.doctor_id else None

    def validate_num_sessions(self, value):
        if value < 1:
            raise serializers.ValidationError('num_sessions must be at least 1.')
        return value


class PatientSubscriptionSerializer(serializers.ModelSerializer):
    package_name = serializers.CharField(source='package.name', read_only=True)
    package_type = serializers.CharField(source='package.package_type', read_only=True)
    sessions_remaining = serializers.IntegerField(read_only=True)

    class Meta:
        model = PatientSubscription
        fields = [
            'id',
            'code',
            'patient',
            'package',
            'package_name',
            'package_type',
            'start_date',
            'end_date',
            'sessions_total',
            'sessions_used',
            'sessions_remaining',
            'last_session_at',
            'amount_paid',
            'amount_due',
            'payment_status',
            'status',
            'notes',
            'created_at',
        ]
        read_only_fields = fields


class EnrollSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    package_id = serializers.IntegerField()
    start_date = serializers.DateField()
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class UseSessionSerializer(serializers.Serializer):
    appointment_id = serializers.IntegerField(required=False, allow_null=True)
