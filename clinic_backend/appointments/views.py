import logging
from datetime import datetime

from rest_framework import generics, status
from rest_framework.response import Response

from clinic_backend.core.exceptions import InvalidRequest
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.services import get_patient_or_404

from .models import Appointment, DoctorAvailability, DoctorTimeSlot
from .permissions import AppointmentPermission, DoctorSchedulePermission, DoctorTimeSlotPermission
from .serializers import (
	AppointmentCreateSerializer,
	AppointmentDetailSerializer,
	AppointmentSerializer,
	AppointmentStatusSerializer,
	AppointmentUpdateSerializer,
	DoctorAvailabilitySerializer,
	DoctorTimeSlotAddSerializer,
	DoctorTimeSlotSerializer,
)
from .services import (
	add_time_slot,
	available_time_slots,
	booked_times,
	check_in,
	create_appointment,
	end_visit,
	replace_time_slots,
	resolve_doctor,
	set_status,
	start_visit,
	todays_summary,
	upsert_availability,
)

logger = logging.getLogger(__name__)


def _parse_date_param(value, name='date'):
	try:
		return datetime.strptime(value, '%Y-%m-%d').date()
	except (TypeError, ValueError):
		raise InvalidRequest(f'{name} must be in format YYYY-MM-DD')


def _scoped_appointments(user):
	qs = Appointment.objects.select_related('patient', 'doctor')
	if role_name_of(user) == 'doctor':
		return qs.filter(doctor=user)
	return qs


class AppointmentListCreateView(generics.ListCreateAPIView):
	"""List (filters: date, doctor_id, status, patient_id) and book appointments."""

	permission_classes = [AppointmentPermission]

	def get_queryset(self):
		qs = _scoped_appointments(self.request.user)
		params = self.request.query_params

		if params.get('date'):
			qs = qs.filter(appointment_date=_parse_date_param(params['date']))
		if params.get('doctor_id'):
			qs = qs.filter(doctor_id=params['doctor_id'])
		if params.get('patient_id'):
			qs = qs.filter(patient_id=params['patient_id'])
		if params.get('status'):
			qs = qs.filter(status=params['status'])
		return qs.order_by('appointment_date', 'appointment_time', 'id')

	def get_serializer_class(self):
		if self.request.method == 'POST':
			return AppointmentCreateSerializer
		return AppointmentSerializer

	def list(self, request, *args, **kwargs):
		log_patient_action(request.user, 'appointment_list')
		return super().list(request, *args, **kwargs)

	def create(self, request, *args, **kwargs):
		serializer = AppointmentCreateSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		data = serializer.validated_data

		patient = get_patient_or_404(data['patient_id'])
		doctor_id = data.get('doctor_id')
		if doctor_id:
			doctor = resolve_doctor(doctor_id)
		elif role_name_of(request.user) == 'doctor':
			doctor = request.user
		else:
			doctor = None

		appointment = create_appointment(
			patient=patient,
			doctor=doctor,
			appointment_date=data['appointment_date'],
			appointment_time=data['appointment_time'],
			appointment_type=data.get('appointment_type'),
			reason_for_visit=data.get('reason_for_visit', ''),
			notes=data.get('notes', ''),
			user=request.user,
		)
		read_serializer = AppointmentSerializer(appointment, context={'request': request})
		return Response(read_serializer.data, status=status.HTTP_201_CREATED)


class AppointmentDetailView(generics.RetrieveUpdateDestroyAPIView):
	permission_classes = [AppointmentPermission]

	def get_queryset(self):
		return _scoped_appointments(self.request.user)

	def get_serializer_class(self):
		if self.request.method in ('PUT', 'PATCH'):
			return AppointmentUpdateSerializer
		return AppointmentDetailSerializer

	def retrieve(self, request, *args, **kwargs):
		appointment = self.get_object()
		log_patient_action(request.user, 'appointment_view', patient_id=appointment.patient_id)
		return Response(AppointmentDetailSerializer(appointment).data)

	def update(self, request, *args, **kwargs):
		partial = kwargs.pop('partial', False)
		appointment = self.get_object()
		serializer = AppointmentUpdateSerializer(appointment, data=request.data, partial=partial)
		serializer.is_valid(raise_exception=True)
		appointment = serializer.save()
		log_patient_action(request.user, 'appointment_update', patient_id=appointment.patient_id)
		return Response(AppointmentDetailSerializer(appointment).data)

	def destroy(self, request, *args, **kwargs):
		appointment = self.get_object()
		patient_id = appointment.patient_id
		appointment.delete()
		log_patient_action(request.user, 'appointment_delete', patient_id=patient_id)
		return Response({'success': True, 'message': 'Appointment deleted'}, status=status.HTTP_200_OK)


class _AppointmentActionView(generics.GenericAPIView):
	permission_classes = [AppointmentPermission]

	def get_queryset(self):
		return _scoped_appointments(self.request.user)

	def respond(self, appointment):
		return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)


class AppointmentStatusUpdateView(_AppointmentActionView):
	"""PATCH/PUT /api/appointments/<pk>/status/"""

	serializer_class = AppointmentStatusSerializer

	def patch(self, request, *args, **kwargs):
		appointment = self.get_object()
		serializer = self.get_serializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		appointment = set_status(
			appointment,
			serializer.validated_data['status'],
			user=request.user,
			notes=serializer.validated_data.get('notes', ''),
		)
		return self.respond(appointment)

	def put(self, request, *args, **kwargs):
		return self.patch(request, *args, **kwargs)


class AppointmentCheckInView(_AppointmentActionView):
	def post(self, request, *args, **kwargs):
		return self.respond(check_in(self.get_object(), user=request.user))


class AppointmentStartVisitView(_AppointmentActionView):
	def post(self, request, *args, **kwargs):
		return self.respond(start_visit(self.get_object(), user=request.user))


class AppointmentEndVisitView(_AppointmentActionView):
	def post(self, request, *args, **kwargs):
		return self.respond(end_visit(self.get_object(), user=request.user))


class TodaySummaryView(generics.GenericAPIView):
	permission_classes = [AppointmentPermission]

	def get(self, request, *args, **kwargs):
		qs = _scoped_appointments(request.user)
		if request.query_params.get('doctor_id'):
			qs = qs.filter(doctor_id=request.query_params['doctor_id'])
		return Response(todays_summary(qs))


class BookedSlotsView(generics.GenericAPIView):
	"""GET /api/appointments/booked-slots/?doctor_id=&date="""

	permission_classes = [AppointmentPermission]

	def get(self, request, *args, **kwargs):
		doctor_id = request.query_params.get('doctor_id')
		day = request.query_params.get('date')
		if not doctor_id or not day:
			raise InvalidRequest('doctor_id and date are required')
		doctor = resolve_doctor(doctor_id)
		slots = booked_times(doctor, _parse_date_param(day))
		return Response({'booked_slots': slots, 'count': len(slots)})


class DoctorTimeSlotsView(generics.GenericAPIView):
	"""GET active slots / PUT replace all slots of a doctor."""

	permission_classes = [DoctorSchedulePermission]
	serializer_class = DoctorTimeSlotSerializer

	def get(self, request, doctor_id, *args, **kwargs):
		doctor = resolve_doctor(doctor_id)
		day = request.query_params.get('date')
		slots = available_time_slots(
			doctor,
			appointment_type=request.query_params.get('appointment_type'),
			day=_parse_date_param(day) if day else None,
		)
		return Response(DoctorTimeSlotSerializer(slots, many=True).data)

	def put(self, request, doctor_id, *args, **kwargs):
		doctor = resolve_doctor(doctor_id)
		slots = replace_time_slots(doctor, request.data.get('slots'), user=request.user)
		return Response({
			'success': True,
			'message': 'Time slots updated successfully',
			'slots': DoctorTimeSlotSerializer(slots, many=True).data,
		})


class DoctorTimeSlotAddView(generics.GenericAPIView):
	permission_classes = [DoctorSchedulePermission]
	serializer_class = DoctorTimeSlotAddSerializer

	def post(self, request, doctor_id, *args, **kwargs):
		doctor = resolve_doctor(doctor_id)
		serializer = self.get_serializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		slot = add_time_slot(
			doctor,
			slot_time=serializer.validated_data['slot_time'],
			appointment_type=serializer.validated_data.get('appointment_type') or None,
		)
		return Response(DoctorTimeSlotSerializer(slot).data, status=status.HTTP_201_CREATED)


class DoctorTimeSlotDeleteView(generics.DestroyAPIView):
	permission_classes = [DoctorTimeSlotPermission]
	queryset = DoctorTimeSlot.objects.all()

	def destroy(self, request, *args, **kwargs):
		slot = self.get_object()
		slot.delete()
		return Response({'success': True, 'message': 'Time slot deleted'}, status=status.HTTP_200_OK)


class DoctorAvailabilityView(generics.GenericAPIView):
	"""GET weekly availability / PUT upsert days of the week."""

	permission_classes = [DoctorSchedulePermission]
	serializer_class = DoctorAvailabilitySerializer

	def get(self, request, doctor_id, *args, **kwargs):
		doctor = resolve_doctor(doctor_id)
		rows = DoctorAvailability.objects.filter(doctor=doctor).order_by('day_of_week')
		return Response(DoctorAvailabilitySerializer(rows, many=True).data)

	def put(self, request, doctor_id, *args, **kwargs):
		doctor = resolve_doctor(doctor_id)
		rows = upsert_availability(doctor, request.data.get('availability'))
		return Response(DoctorAvailabilitySerializer(rows, many=True).data)
