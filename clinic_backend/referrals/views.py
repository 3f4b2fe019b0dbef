import logging

from rest_framework import generics, status
from rest_framework.response import Response

from clinic_backend.core.exceptions import NotFound
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.services import get_patient_or_404

from .models import PatientReferral, ReferralDoctor
from .permissions import ReferralNetworkPermission, ReferralPermission
from .serializers import (
    PatientReferralCreateSerializer,
    PatientReferralSerializer,
    PatientReferralUpdateSerializer,
    ReferralDoctorSerializer,
)
from .services import NETWORK_UPDATE_FIELDS, REFERRAL_UPDATE_FIELDS, create_referral, pick_update_fields

logger = logging.getLogger(__name__)


def _scoped_referrals(user):
    qs = PatientReferral.objects.select_related('patient', 'referred_by', 'referred_to_doctor')
    if role_name_of(user) == 'doctor':
        qs = qs.filter(referred_by=user)
    return qs


class ReferralListCreateView(generics.ListCreateAPIView):
    """GET: referrals (?patient_id=&status=). POST: refer a patient."""

    permission_classes = [ReferralPermission]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PatientReferralCreateSerializer
        return PatientReferralSerializer

    def get_queryset(self):
        qs = _scoped_referrals(self.request.user)
        params = self.request.query_params
        if params.get('patient_id'):
            qs = qs.filter(patient_id=params['patient_id'])
        if params.get('status'):
            qs = qs.filter(status=params['status'])
        return qs

    def create(self, request, *args, **kwargs):
        serializer = PatientReferralCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        patient = get_patient_or_404(data.pop('patient_id'))
        network_doctor = None
        doctor_id = data.pop('referred_to_doctor_id', None)
        if doctor_id:
            network_doctor = ReferralDoctor.objects.filter(pk=doctor_id, is_active=True).first()
            if network_doctor is None:
                raise NotFound('Referral doctor not found')

        referral = create_referral(
            patient=patient,
            referral_date=data.pop('referral_date'),
            referred_to_doctor=network_doctor,
            user=request.user,
            **data,
        )
        return Response(
            {
                'success': True,
                'message': 'Referral created successfully',
                'referral_id': referral.pk,
                'referral': PatientReferralSerializer(referral).data,
            },
            status=status.HTTP_201_CREATED,
        )


class ReferralDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [ReferralPermission]

    def get_queryset(self):
        return _scoped_referrals(self.request.user)

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return PatientReferralUpdateSerializer
        return PatientReferralSerializer

    def retrieve(self, request, *args, **kwargs):
        referral = self.get_object()
        log_patient_action(request.user, 'referral_view', patient_id=referral.patient_id)
        return Response(PatientReferralSerializer(referral).data)

    def update(self, request, *args, **kwargs):
        referral = self.get_object()
        updates = pick_update_fields(request.data, REFERRAL_UPDATE_FIELDS)
        serializer = PatientReferralUpdateSerializer(referral, data=updates, partial=True)
        serializer.is_valid(raise_exception=True)
        referral = serializer.save()
        log_patient_action(
            request.user,
            'referral_update',
            patient_id=referral.patient_id,
            meta={'fields': sorted(updates)},
        )
        return Response({
            'success': True,
            'message': 'Referral updated successfully',
            'referral': PatientReferralSerializer(referral).data,
        })

    def destroy(self, request, *args, **kwargs):
        referral = self.get_object()
        patient_id = referral.patient_id
        referral.delete()
        log_patient_action(request.user, 'referral_delete', patient_id=patient_id)
        return Response({'success': True, 'message': 'Referral deleted successfully'}, status=status.HTTP_200_OK)


class ReferralNetworkListCreateView(generics.ListCreateAPIView):
    """Active network doctors: preferred first, then by referral count and name."""

    permission_classes = [ReferralNetworkPermission]
    serializer_class = ReferralDoctorSerializer

    def get_queryset(self):
        qs = ReferralDoctor.objects.filter(is_active=True)
        if role_name_of(self.request.user) == 'doctor':
            qs = qs.filter(created_by=self.request.user)
        specialization = self.request.query_params.get('specialization')
        if specialization:
            qs = qs.filter(specialization__icontains=specialization)
        return qs.order_by('-is_preferred', '-referral_count', 'name')

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class ReferralNetworkDetailView(generics.RetrieveUpdateDestroyAPIView):
    """DELETE removes the doctor from the network (soft delete)."""

    permission_classes = [ReferralNetworkPermission]
    serializer_class = ReferralDoctorSerializer

    def get_queryset(self):
        qs = ReferralDoctor.objects.all()
        if role_name_of(self.request.user) == 'doctor':
            qs = qs.filter(created_by=self.request.user)
        return qs

    def update(self, request, *args, **kwargs):
        doctor = self.get_object()
        updates = pick_update_fields(request.data, NETWORK_UPDATE_FIELDS)
        serializer = self.get_serializer(doctor, data=updates, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    def destroy(self, request, *args, **kwargs):
        doctor = self.get_object()
        doctor.is_active = False
        doctor.save(update_fields=['is_active', 'updated_at'])
        return Response({'success': True, 'message': 'Network doctor removed'}, status=status.HTTP_200_OK)
