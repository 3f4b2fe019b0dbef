import logging
from collections import OrderedDict

from django.db.models import Q

from rest_framework import generics, status
from rest_framework.response import Response

from clinic_backend.appointments.models import Appointment
from clinic_backend.appointments.services import resolve_doctor
from clinic_backend.core.exceptions import InvalidRequest, NotFound
from clinic_backend.core.pagination import ClinicPagination
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.serializers import VitalsSerializer
from clinic_backend.patients.services import get_patient_or_404

from .models import Medicine, Prescription, PrescriptionTemplate
from .permissions import FollowUpPermission, PrescriptionPermission, PrescriptionTemplatePermission
from .serializers import (
    FollowUpSerializer,
    MedicineSerializer,
    PrescriptionCreateSerializer,
    PrescriptionDetailSerializer,
    PrescriptionSerializer,
    PrescriptionTemplateSerializer,
)
from .services import add_prescription, latest_vitals, template_prefill, upcoming_follow_ups

logger = logging.getLogger(__name__)


def _prescriptions():
    return Prescription.objects.select_related('patient', 'doctor', 'visit_advice').prefetch_related(
        'items__medicine'
    )


# ---------------------------------------------------------------------------
# Prescriptions
# ---------------------------------------------------------------------------


class PrescriptionListCreateView(generics.ListCreateAPIView):
    """GET: search prescriptions (patient_id, date_from, date_to). POST: save one."""

    permission_classes = [PrescriptionPermission]
    pagination_class = ClinicPagination

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PrescriptionCreateSerializer
        return PrescriptionSerializer

    def get_queryset(self):
        qs = _prescriptions()
        params = self.request.query_params
        if params.get('patient_id'):
            qs = qs.filter(patient_id=params['patient_id'])
        if params.get('doctor_id'):
            qs = qs.filter(doctor_id=params['doctor_id'])
        if params.get('date_from'):
            qs = qs.filter(prescribed_date__gte=params['date_from'])
        if params.get('date_to'):
            qs = qs.filter(prescribed_date__lte=params['date_to'])
        return qs

    def create(self, request, *args, **kwargs):
        serializer = PrescriptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        patient = get_patient_or_404(data['patient_id'])

        appointment = None
        if data.get('appointment_id'):
            appointment = Appointment.objects.select_related('doctor').filter(pk=data['appointment_id']).first()
            if appointment is None:
                logger.warning('Appointment %s not found; saving prescription unlinked', data['appointment_id'])

        template = None
        if data.get('template_id'):
            template = PrescriptionTemplate.objects.filter(pk=data['template_id']).first()

        doctor = resolve_doctor(data['doctor_id']) if data.get('doctor_id') else None

        prescription, warnings = add_prescription(
            patient=patient,
            medications=data['medications'],
            doctor=doctor,
            appointment=appointment,
            template=template,
            symptoms=data.get('symptoms'),
            diagnosis=data.get('diagnosis'),
            vitals=data.get('vitals'),
            advice=data.get('advice', ''),
            follow_up_days=data.get('follow_up_days'),
            follow_up_date=data.get('follow_up_date'),
            patient_notes=data.get('patient_notes', ''),
            private_notes=data.get('private_notes', ''),
            user=request.user,
        )
        return Response(
            {
                'id': prescription.pk,
                'message': 'Prescription saved successfully',
                'doctor_id': prescription.doctor_id,
                'warnings': warnings,
            },
            status=status.HTTP_201_CREATED,
        )


class PrescriptionDetailView(generics.RetrieveAPIView):
    permission_classes = [PrescriptionPermission]
    serializer_class = PrescriptionDetailSerializer

    def get_queryset(self):
        return _prescriptions()

    def retrieve(self, request, *args, **kwargs):
        prescription = self.get_object()
        log_patient_action(request.user, 'prescription_view', patient_id=prescription.patient_id)
        vitals = latest_vitals(prescription.patient, prescription.prescribed_date)
        return Response(PrescriptionDetailSerializer(prescription, context={'vitals': vitals}).data)


class PatientPrescriptionListView(generics.ListAPIView):
    permission_classes = [PrescriptionPermission]
    serializer_class = PrescriptionSerializer
    pagination_class = ClinicPagination

    def get_queryset(self):
        patient = get_patient_or_404(self.kwargs['patient_id'])
        return _prescriptions().filter(patient=patient)


class LastPrescriptionView(generics.GenericAPIView):
    """GET /api/prescriptions/patient/<patient_id>/last/

    Most recent prescription with items and the patient's latest vitals.
    """

    permission_classes = [PrescriptionPermission]

    def get(self, request, *args, **kwargs):
        patient = get_patient_or_404(self.kwargs['patient_id'])
        prescription = _prescriptions().filter(patient=patient).first()
        if prescription is None:
            raise NotFound('No previous prescriptions found for this patient')

        vitals = latest_vitals(patient)
        log_patient_action(request.user, 'prescription_view', patient_id=patient.pk)
        return Response({
            'success': True,
            'prescription': PrescriptionSerializer(prescription).data,
            'vitals': VitalsSerializer(vitals).data if vitals is not None else {},
            'message': 'Last prescription retrieved successfully',
        })


class MedicineListView(generics.ListAPIView):
    """GET /api/medicines/?search= (max 50 rows)."""

    permission_classes = [PrescriptionPermission]
    serializer_class = MedicineSerializer

    def get_queryset(self):
        qs = Medicine.objects.all()
        search = (self.request.query_params.get('search') or '').strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(generic_name__icontains=search))
        return qs[:50]


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class PrescriptionTemplateListCreateView(generics.ListCreateAPIView):
    permission_classes = [PrescriptionTemplatePermission]
    serializer_class = PrescriptionTemplateSerializer

    def get_queryset(self):
        qs = PrescriptionTemplate.objects.filter(is_active=True)
        params = self.request.query_params
        if params.get('category'):
            qs = qs.filter(category=params['category'])
        search = (params.get('search') or '').strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
        return qs.order_by('category', 'name', 'id')

    def perform_create(self, serializer):
        serializer.save(
            clinic=getattr(self.request.user, 'clinic', None),
            created_by=self.request.user,
        )


class PrescriptionTemplateDetailView(generics.RetrieveUpdateDestroyAPIView):
    """DELETE deactivates the template."""

    permission_classes = [PrescriptionTemplatePermission]
    serializer_class = PrescriptionTemplateSerializer
    queryset = PrescriptionTemplate.objects.all()

    def destroy(self, request, *args, **kwargs):
        template = self.get_object()
        template.is_active = False
        template.save(update_fields=['is_active', 'updated_at'])
        return Response({'success': True, 'message': 'Template deleted successfully'}, status=status.HTTP_200_OK)


class PrescriptionTemplateUseView(generics.GenericAPIView):
    """POST /api/prescription-templates/<pk>/use/"""

    permission_classes = [PrescriptionTemplatePermission]
    queryset = PrescriptionTemplate.objects.filter(is_active=True)

    def post(self, request, *args, **kwargs):
        template = self.get_object()
        logger.info('Template %s applied by user %s', template.pk, request.user.pk)
        return Response({'message': 'Template usage recorded', 'template': template_prefill(template)})


class PrescriptionTemplatesByCategoryView(generics.GenericAPIView):
    """GET /api/prescription-templates/by-category/ -> {category: [templates]}"""

    permission_classes = [PrescriptionTemplatePermission]

    def get(self, request, *args, **kwargs):
        grouped = OrderedDict()
        templates = PrescriptionTemplate.objects.filter(is_active=True).order_by('category', 'name', 'id')
        for template in templates:
            key = template.category or 'General'
            grouped.setdefault(key, []).append(PrescriptionTemplateSerializer(template).data)
        return Response(grouped)


# ---------------------------------------------------------------------------
# Follow-ups
# ---------------------------------------------------------------------------


class FollowUpListView(generics.ListAPIView):
    """GET /api/follow-ups/?days=7&patient_id="""

    permission_classes = [FollowUpPermission]
    serializer_class = FollowUpSerializer

    def get_queryset(self):
        raw_days = self.request.query_params.get('days') or '7'
        try:
            days = int(raw_days)
        except ValueError:
            raise InvalidRequest('days must be an integer')
        if days < 0:
            raise InvalidRequest('days must not be negative')

        doctor = self.request.user if role_name_of(self.request.user) == 'doctor' else None
        return upcoming_follow_ups(
            days,
            patient_id=self.request.query_params.get('patient_id'),
            doctor=doctor,
        )
