import logging

from django.db.models import Q

from rest_framework import generics, status
from rest_framework.response import Response

from clinic_backend.appointments.models import Appointment
from clinic_backend.appointments.services import resolve_doctor
from clinic_backend.core.exceptions import NotFound
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.services import get_patient_or_404

from .models import QueueEntry
from .permissions import QueuePermission
from .serializers import QueueAddSerializer, QueueEntrySerializer, QueueStatusSerializer
from .services import add_to_queue, queue_stats, todays_entries, update_queue_status

logger = logging.getLogger(__name__)


def _scoped(qs, user):
    if role_name_of(user) == 'doctor':
        return qs.filter(Q(doctor=user) | Q(doctor__isnull=True))
    return qs


class QueueListCreateView(generics.ListCreateAPIView):
    """GET today's queue (?doctor_id=) / POST add a patient to the queue."""

    permission_classes = [QueuePermission]

    def get_queryset(self):
        qs = todays_entries(self.request.query_params.get('doctor_id'))
        return _scoped(qs, self.request.user)

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return QueueAddSerializer
        return QueueEntrySerializer

    def create(self, request, *args, **kwargs):
        serializer = QueueAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        patient = get_patient_or_404(data['patient_id'])

        appointment = None
        if data.get('appointment_id'):
            appointment = Appointment.objects.filter(pk=data['appointment_id']).first()
            if appointment is None:
                raise NotFound('Appointment not found')

        if data.get('doctor_id'):
            doctor = resolve_doctor(data['doctor_id'])
        elif appointment is not None:
            doctor = appointment.doctor
        elif role_name_of(request.user) == 'doctor':
            doctor = request.user
        else:
            doctor = None

        entry = add_to_queue(
            patient=patient,
            doctor=doctor,
            appointment=appointment,
            priority=data.get('priority'),
            chief_complaint=data.get('chief_complaint', ''),
            notes=data.get('notes', ''),
            user=request.user,
        )
        return Response(
            {'success': True, 'queue_id': entry.pk, 'token_number': entry.token_number},
            status=status.HTTP_201_CREATED,
        )


class QueueEntryDetailView(generics.RetrieveDestroyAPIView):
    permission_classes = [QueuePermission]
    serializer_class = QueueEntrySerializer
    queryset = QueueEntry.objects.select_related('patient', 'doctor')

    def destroy(self, request, *args, **kwargs):
        entry = self.get_object()
        patient_id = entry.patient_id
        entry.delete()
        log_patient_action(request.user, 'queue_remove', patient_id=patient_id)
        return Response({'success': True, 'message': 'Removed from queue'}, status=status.HTTP_200_OK)


class QueueStatusUpdateView(generics.GenericAPIView):
    """PATCH /api/queue/<pk>/status/"""

    permission_classes = [QueuePermission]
    serializer_class = QueueStatusSerializer
    queryset = QueueEntry.objects.select_related('patient', 'doctor', 'appointment')

    def patch(self, request, *args, **kwargs):
        entry = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = update_queue_status(
            entry,
            serializer.validated_data['status'],
            skip_billing=serializer.validated_data.get('skip_billing'),
            user=request.user,
        )
        return Response(QueueEntrySerializer(entry).data)

    def put(self, request, *args, **kwargs):
        return self.patch(request, *args, **kwargs)


class QueueStatsView(generics.GenericAPIView):
    permission_classes = [QueuePermission]

    def get(self, request, *args, **kwargs):
        doctor_id = request.query_params.get('doctor_id')
        if role_name_of(request.user) == 'doctor':
            doctor_id = request.user.id
        return Response(queue_stats(doctor_id))
