import logging

from django.db.models import Q

from rest_framework import generics, status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from clinic_backend.core.exceptions import Conflict
from clinic_backend.core.pagination import ClinicPagination
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.models import (
    FamilyHistory,
    InsurancePolicy,
    MedicalRecord,
    Patient,
    PatientAllergy,
    Vitals,
)
from clinic_backend.patients.permissions import (
    InsurancePolicyPermission,
    PatientClinicalPermission,
    PatientPermission,
)
from clinic_backend.patients.serializers import (
    FamilyHistorySerializer,
    InsurancePolicySerializer,
    MedicalRecordSerializer,
    MedicalRecordUploadSerializer,
    PatientAllergySerializer,
    PatientMergeSerializer,
    PatientReadSerializer,
    PatientWriteSerializer,
    VitalsSerializer,
)
from clinic_backend.patients.services import (
    generate_uhid,
    get_patient_or_404,
    merge_patients,
    resolve_patient,
    save_medical_record,
    visible_patients_for,
)

logger = logging.getLogger(__name__)


class PatientListCreateView(generics.ListCreateAPIView):
    """List patients (search + filters, paginated) or register a new one."""

    permission_classes = [PatientPermission]
    pagination_class = ClinicPagination

    def get_queryset(self):
        qs = visible_patients_for(self.request.user)
        params = self.request.query_params

        search = (params.get('search') or '').strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search)
                | Q(uhid__icontains=search)
                | Q(phone__icontains=search)
            )
        if params.get('gender'):
            qs = qs.filter(gender=params['gender'].upper()[:1])
        if params.get('blood_group'):
            qs = qs.filter(blood_group=params['blood_group'])
        if params.get('city'):
            qs = qs.filter(city__iexact=params['city'])
        return qs

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PatientWriteSerializer
        return PatientReadSerializer

    def list(self, request, *args, **kwargs):
        log_patient_action(request.user, 'patient_list')
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        serializer = PatientWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        uhid = serializer.validated_data.pop('uhid', '') or generate_uhid()
        if Patient.objects.filter(uhid=uhid).exists():
            raise Conflict('Patient with this UHID already exists', uhid=uhid)

        user = request.user
        patient = serializer.save(
            uhid=uhid,
            created_by=user,
            clinic=serializer.validated_data.get('clinic') or getattr(user, 'clinic', None),
        )
        log_patient_action(user, 'patient_created', patient_id=patient.pk)

        data = PatientReadSerializer(patient).data
        return Response(data, status=status.HTTP_201_CREATED)


class PatientDetailView(generics.RetrieveUpdateDestroyAPIView):
    """Retrieve/update/delete a patient by numeric id or UHID."""

    permission_classes = [PatientPermission]

    def get_queryset(self):
        return visible_patients_for(self.request.user)

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return PatientWriteSerializer
        return PatientReadSerializer

    def get_object(self):
        patient = resolve_patient(self.kwargs['identifier'], qs=self.get_queryset())
        self.check_object_permissions(self.request, patient)
        return patient

    def retrieve(self, request, *args, **kwargs):
        patient = self.get_object()
        log_patient_action(request.user, 'patient_view', patient_id=patient.pk)
        return Response(PatientReadSerializer(patient).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        patient = self.get_object()
        serializer = PatientWriteSerializer(patient, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        uhid = serializer.validated_data.get('uhid')
        if not uhid:
            serializer.validated_data.pop('uhid', None)
        elif Patient.objects.filter(uhid=uhid).exclude(pk=patient.pk).exists():
            raise Conflict('Patient with this UHID already exists', uhid=uhid)

        patient = serializer.save()
        log_patient_action(request.user, 'patient_updated', patient_id=patient.pk)
        return Response(PatientReadSerializer(patient).data)

    def destroy(self, request, *args, **kwargs):
        patient = self.get_object()
        patient_id = patient.pk
        patient.delete()
        log_patient_action(request.user, 'patient_deleted', patient_id=patient_id)
        return Response({'success': True, 'message': 'Patient deleted'}, status=status.HTTP_200_OK)


class PatientMergeView(generics.GenericAPIView):
    """POST /api/patients/merge/"""

    permission_classes = [PatientPermission]
    serializer_class = PatientMergeSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        primary = merge_patients(
            primary_id=serializer.validated_data['primary_patient_id'],
            merge_ids=serializer.validated_data['patient_ids_to_merge'],
            user=request.user,
        )
        return Response(
            {
                'success': True,
                'message': 'Patients merged successfully',
                'patient': PatientReadSerializer(primary).data,
            },
            status=status.HTTP_200_OK,
        )


class _PatientChildMixin:
    """Nested ``/patients/<patient_id>/...`` resources."""

    model = None
    audit_prefix = ''

    def get_patient(self):
        if not hasattr(self, '_patient'):
            self._patient = get_patient_or_404(self.kwargs['patient_id'])
        return self._patient

    def get_queryset(self):
        return self.model.objects.filter(patient=self.get_patient())

    def list(self, request, *args, **kwargs):
        patient = self.get_patient()
        log_patient_action(request.user, f'{self.audit_prefix}_view', patient_id=patient.pk)
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):
        patient = self.get_patient()
        obj = serializer.save(patient=patient)
        log_patient_action(
            self.request.user,
            f'{self.audit_prefix}_create',
            patient_id=patient.pk,
            meta={'id': obj.pk},
        )


class PatientAllergyListCreateView(_PatientChildMixin, generics.ListCreateAPIView):
    permission_classes = [PatientClinicalPermission]
    serializer_class = PatientAllergySerializer
    model = PatientAllergy
    audit_prefix = 'allergy'

    def get_queryset(self):
        qs = super().get_queryset()
        if self.request.query_params.get('include_inactive') not in ('1', 'true'):
            qs = qs.filter(is_active=True)
        return qs


class PatientAllergyDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [PatientClinicalPermission]
    serializer_class = PatientAllergySerializer
    queryset = PatientAllergy.objects.all()

    def perform_update(self, serializer):
        obj = serializer.save()
        log_patient_action(self.request.user, 'allergy_update', patient_id=obj.patient_id)

    def perform_destroy(self, instance):
        patient_id = instance.patient_id
        instance.delete()
        log_patient_action(self.request.user, 'allergy_delete', patient_id=patient_id)


class FamilyHistoryListCreateView(_PatientChildMixin, generics.ListCreateAPIView):
    permission_classes = [PatientClinicalPermission]
    serializer_class = FamilyHistorySerializer
    model = FamilyHistory
    audit_prefix = 'family_history'


class FamilyHistoryDetailView(generics.RetrieveDestroyAPIView):
    permission_classes = [PatientClinicalPermission]
    serializer_class = FamilyHistorySerializer
    queryset = FamilyHistory.objects.all()

    def perform_destroy(self, instance):
        patient_id = instance.patient_id
        instance.delete()
        log_patient_action(self.request.user, 'family_history_delete', patient_id=patient_id)


class VitalsListCreateView(_PatientChildMixin, generics.ListCreateAPIView):
    permission_classes = [PatientClinicalPermission]
    serializer_class = VitalsSerializer
    model = Vitals
    audit_prefix = 'vitals'

    def perform_create(self, serializer):
        patient = self.get_patient()
        vitals = serializer.save(patient=patient, recorded_by=self.request.user)
        log_patient_action(
            self.request.user,
            'vitals_create',
            patient_id=patient.pk,
            meta={'id': vitals.pk, 'bmi': str(vitals.bmi) if vitals.bmi is not None else None},
        )


class MedicalRecordListCreateView(_PatientChildMixin, generics.ListCreateAPIView):
    """List records or upload one (multipart/form-data, field ``file``)."""

    permission_classes = [PatientClinicalPermission]
    serializer_class = MedicalRecordSerializer
    parser_classes = [MultiPartParser, FormParser]
    model = MedicalRecord
    audit_prefix = 'medical_record'

    def create(self, request, *args, **kwargs):
        patient = self.get_patient()
        upload = MedicalRecordUploadSerializer(data=request.data)
        upload.is_valid(raise_exception=True)

        record = save_medical_record(
            patient=patient,
            upload=upload.validated_data['file'],
            user=request.user,
            record_type=upload.validated_data.get('record_type'),
            description=upload.validated_data.get('description', ''),
        )
        data = MedicalRecordSerializer(record, context={'request': request}).data
        return Response(data, status=status.HTTP_201_CREATED)


class MedicalRecordDetailView(generics.RetrieveDestroyAPIView):
    permission_classes = [PatientClinicalPermission]
    serializer_class = MedicalRecordSerializer
    queryset = MedicalRecord.objects.all()

    def perform_destroy(self, instance):
        patient_id = instance.patient_id
        instance.file.delete(save=False)
        instance.delete()
        log_patient_action(self.request.user, 'medical_record_delete', patient_id=patient_id)


class InsurancePolicyListCreateView(_PatientChildMixin, generics.ListCreateAPIView):
    permission_classes = [InsurancePolicyPermission]
    serializer_class = InsurancePolicySerializer
    model = InsurancePolicy
    audit_prefix = 'insurance'


class InsurancePolicyDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [InsurancePolicyPermission]
    serializer_class = InsurancePolicySerializer
    queryset = InsurancePolicy.objects.all()

    def perform_update(self, serializer):
        obj = serializer.save()
        log_patient_action(self.request.user, 'insurance_update', patient_id=obj.patient_id)

    def perform_destroy(self, instance):
        patient_id = instance.patient_id
        instance.delete()
        log_patient_action(self.request.user, 'insurance_delete', patient_id=patient_id)
