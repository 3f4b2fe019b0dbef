from rest_framework import serializers

from clinic_backend.core.utils import format_hhmm

from .models import Appointment, AppointmentStatusHistory, DoctorAvailability, DoctorTimeSlot


class AppointmentStatusHistorySerializer(serializers.ModelSerializer):
	class Meta:
		model = AppointmentStatusHistory
		fields = ['id', 'from_status', 'to_status', 'changed_by', 'notes', 'changed_at']


class AppointmentSerializer(serializers.ModelSerializer):
	"""Read serializer with flattened patient / doctor info for list screens."""

	appointment_time = serializers.TimeField(format='%H:%M')
	patient_name = serializers.CharField(source='patient.name', read_only=True)
	patient_uhid = serializers.CharField(source='patient.uhid', read_only=True)
	patient_phone = serializers.CharField(source='patient.phone', read_only=True)
	doctor_name = serializers.SerializerMethodField()

	class Meta:
		model = Appointment
		fields = [
			'id',
			'patient',
			'patient_name',
			'patient_uhid',
			'patient_phone',
			'doctor',
			'doctor_name',
			'clinic',
			'appointment_date',
			'appointment_time',
			'arrival_type',
			'reason_for_visit',
			'notes',
			'status',
			'payment_status',
			'checked_in_at',
			'visit_started_at',
			'visit_ended_at',
			'waiting_time_minutes',
			'actual_duration_minutes',
			'created_by',
			'created_at',
			'updated_at',
		]
		read_only_fields = fields

	def get_doctor_name(self, obj):
		return obj.doctor.display_name if obj.doctor_id else None


class AppointmentDetailSerializer(AppointmentSerializer):
	status_history = AppointmentStatusHistorySerializer(many=True, read_only=True)

	class Meta(AppointmentSerializer.Meta):
		fields = AppointmentSerializer.Meta.fields + ['status_history']
		read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
	patient_id = serializers.IntegerField()
	doctor_id = serializers.IntegerField(required=False, allow_null=True)
	appointment_date = serializers.DateField()
	appointment_time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
	appointment_type = serializers.CharField(required=False, allow_blank=True, default='')
	reason_for_visit = serializers.CharField(required=False, allow_blank=True, default='')
	notes = serializers.CharField(required=False, allow_blank=True, default='')


class AppointmentUpdateSerializer(serializers.ModelSerializer):
	appointment_time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'], required=False)

	class Meta:
		model = Appointment
		fields = [
			'appointment_date',
			'appointment_time',
			'arrival_type',
			'reason_for_visit',
			'notes',
		]


class AppointmentStatusSerializer(serializers.Serializer):
	status = serializers.CharField()
	notes = serializers.CharField(required=False, allow_blank=True, default='')


class DoctorTimeSlotSerializer(serializers.ModelSerializer):
	slot_time = serializers.SerializerMethodField()

	class Meta:
		model = DoctorTimeSlot
		fields = ['id', 'doctor', 'slot_time', 'appointment_type', 'is_active', 'display_order']
		read_only_fields = fields

	def get_slot_time(self, obj):
		return format_hhmm(obj.slot_time)


class DoctorTimeSlotAddSerializer(serializers.Serializer):
	slot_time = serializers.CharField()
	appointment_type = serializers.CharField(required=False, allow_blank=True, default='')


class DoctorAvailabilitySerializer(serializers.ModelSerializer):
	day_name = serializers.SerializerMethodField()
	start_time = serializers.TimeField(format='%H:%M', allow_null=True)
	end_time = serializers.TimeField(format='%H:%M', allow_null=True)

	class Meta:
		model = DoctorAvailability
		fields = ['id', 'doctor', 'day_of_week', 'day_name', 'is_available', 'start_time', 'end_time']
		read_only_fields = fields

	def get_day_name(self, obj):
		return DoctorAvailability.DAY_NAMES[obj.day_of_week % 7]
