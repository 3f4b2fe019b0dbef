from rest_framework import serializers

from clinic_backend.patients.serializers import VitalsSerializer

from .models import Medicine, Prescription, PrescriptionItem, PrescriptionTemplate, VisitAdvice
from .services import parse_json_list


class MedicineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Medicine
        fields = ['id', 'name', 'generic_name', 'brand', 'form', 'strength']


class PrescriptionItemSerializer(serializers.ModelSerializer):
    medication_name = serializers.CharField(source='medicine_name', read_only=True)
    generic_name = serializers.SerializerMethodField()

    class Meta:
        model = PrescriptionItem
        fields = [
            'id',
            'medicine',
            'medication_name',
            'generic_name',
            'dosage',
            'frequency',
            'duration',
            'route',
            'instructions',
            'quantity',
            'sort_order',
        ]
        read_only_fields = fields

    def get_generic_name(self, obj):
        return obj.medicine.generic_name if obj.medicine_id else ''


class PrescriptionSerializer(serializers.ModelSerializer):
    """Read serializer: items, patient summary, doctor and follow-up."""

    medications = PrescriptionItemSerializer(source='items', many=True, read_only=True)
    patient_name = serializers.CharField(source='patient.name', read_only=True)
    patient_uhid = serializers.CharField(source='patient.uhid', read_only=True)
    doctor_name = serializers.CharField(source='doctor.display_name', read_only=True)
    specialization = serializers.CharField(source='doctor.specialization', read_only=True)
    next_visit_date = serializers.SerializerMethodField()

    class Meta:
        model = Prescription
        fields = [
            'id',
            'patient',
            'patient_name',
            'patient_uhid',
            'doctor',
            'doctor_name',
            'specialization',
            'clinic',
            'appointment',
            'template',
            'chief_complaint',
            'diagnosis',
            'advice',
            'patient_notes',
            'prescribed_date',
            'status',
            'medications',
            'next_visit_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_next_visit_date(self, obj):
        advice = getattr(obj, 'visit_advice', None)
        return advice.next_visit_date if advice is not None else None


class PrescriptionDetailSerializer(PrescriptionSerializer):
    """Adds private notes and the vitals recorded on the prescription day."""

    vitals = serializers.SerializerMethodField()

    class Meta(PrescriptionSerializer.Meta):
        fields = PrescriptionSerializer.Meta.fields + ['private_notes', 'vitals']
        read_only_fields = fields

    def get_vitals(self, obj):
        vitals = self.context.get('vitals')
        return VitalsSerializer(vitals).data if vitals is not None else {}


class MedicationInputSerializer(serializers.Serializer):
    medication_name = serializers.CharField(required=False, allow_blank=True)
    name = serializers.CharField(required=False, allow_blank=True)
    brand_name = serializers.CharField(required=False, allow_blank=True)
    generic_name = serializers.CharField(required=False, allow_blank=True)
    dosage = serializers.CharField(required=False, allow_blank=True)
    frequency = serializers.CharField(required=False, allow_blank=True)
    duration = serializers.CharField(required=False, allow_blank=True)
    route = serializers.CharField(required=False, allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def validate(self, attrs):
        if not (attrs.get('medication_name') or attrs.get('name') or attrs.get('brand_name')):
            raise serializers.ValidationError('medication_name is required')
        return attrs


class PrescriptionCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    doctor_id = serializers.IntegerField(required=False, allow_null=True)
    appointment_id = serializers.IntegerField(required=False, allow_null=True)
    template_id = serializers.IntegerField(required=False, allow_null=True)
    medications = MedicationInputSerializer(many=True, allow_empty=False)
    symptoms = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    diagnosis = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    vitals = serializers.DictField(required=False, default=dict)
    advice = serializers.CharField(required=False, allow_blank=True, default='')
    follow_up_days = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    follow_up_date = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    patient_notes = serializers.CharField(required=False, allow_blank=True, default='')
    private_notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        # A single diagnosis string is accepted.
        if isinstance(data.get('diagnosis'), str):
            data = dict(data)
            data['diagnosis'] = [data['diagnosis']] if data['diagnosis'] else []
        return super().to_internal_value(data)


class JSONListField(serializers.Field):
    """List stored as JSON; accepts a list, a JSON string or a scalar."""

    def to_internal_value(self, data):
        return parse_json_list(data)

    def to_representation(self, value):
        return parse_json_list(value)


class PrescriptionTemplateSerializer(serializers.ModelSerializer):
    """Read/write serializer.

    ``template_name`` is accepted as an alias of ``name`` and a single
    ``diagnosis`` string becomes ``diagnoses=[diagnosis]``.
    """

    template_name = serializers.CharField(source='name', read_only=True)
    symptoms = JSONListField(required=False)
    diagnoses = JSONListField(required=False)
    medications = JSONListField(required=False)

    class Meta:
        model = PrescriptionTemplate
        fields = [
            'id',
            'name',
            'template_name',
            'category',
            'description',
            'symptoms',
            'diagnoses',
            'medications',
            'investigations',
            'precautions',
            'diet_restrictions',
            'activities',
            'advice',
            'follow_up_days',
            'duration_days',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'template_name', 'is_active', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'required': False},
        }

    def to_internal_value(self, data):
        data = data.copy() if hasattr(data, 'copy') else dict(data)
        if not data.get('name') and data.get('template_name'):
            data['name'] = data['template_name']
        if data.get('diagnoses') in (None, '') and data.get('diagnosis'):
            data['diagnoses'] = [data['diagnosis']]
        return super().to_internal_value(data)

    def validate(self, attrs):
        if self.instance is None and not attrs.get('name'):
            raise serializers.ValidationError({'name': 'Template name is required'})
        return attrs


class FollowUpSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source='patient.name', read_only=True)
    patient_uhid = serializers.CharField(source='patient.uhid', read_only=True)
    patient_phone = serializers.CharField(source='patient.phone', read_only=True)
    original_appointment_date = serializers.DateField(source='appointment.appointment_date', read_only=True)
    reason_for_visit = serializers.CharField(source='appointment.reason_for_visit', read_only=True)
    doctor_id = serializers.IntegerField(source='appointment.doctor_id', read_only=True)
    doctor_name = serializers.SerializerMethodField()

    class Meta:
        model = VisitAdvice
        fields = [
            'id',
            'appointment',
            'patient',
            'patient_name',
            'patient_uhid',
            'patient_phone',
            'doctor_id',
            'doctor_name',
            'original_appointment_date',
            'reason_for_visit',
            'advice',
            'follow_up_days',
            'next_visit_date',
        ]
        read_only_fields = fields

    def get_doctor_name(self, obj):
        doctor = obj.appointment.doctor if obj.appointment_id else None
        return doctor.display_name if doctor is not None else None
