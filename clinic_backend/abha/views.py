import logging

from rest_framework import generics
from rest_framework.response import Response

from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.services import get_patient_or_404

from .models import AbhaRecordLink
from .permissions import AbhaPermission, AbhaSettingsPermission
from .serializers import (
    AbhaRecordLinkSerializer,
    DateRangeSerializer,
    HfrIdSerializer,
    LoginInitSerializer,
    OtpVerifySerializer,
    RegistrationInitSerializer,
    UnlinkSerializer,
)
from .services import (
    abha_dashboard,
    abha_stats,
    abha_status,
    initiate_login,
    initiate_registration,
    set_hfr_id,
    unlink_abha,
    verify_login,
    verify_registration,
)

logger = logging.getLogger(__name__)


class RegistrationInitView(generics.GenericAPIView):
    """POST /api/abha/register/init/ - send an Aadhaar OTP via ABDM."""

    permission_classes = [AbhaPermission]
    serializer_class = RegistrationInitSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        patient = get_patient_or_404(data['patient_id']) if data.get('patient_id') else None
        result = initiate_registration(
            aadhaar_number=data['aadhaar_number'],
            mobile_number=data.get('mobile_number', ''),
            patient=patient,
        )
        return Response(result)


class RegistrationVerifyView(generics.GenericAPIView):
    permission_classes = [AbhaPermission]
    serializer_class = OtpVerifySerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response(
            verify_registration(
                session_id=data['session_id'],
                otp=data['otp'],
                txn_id=data.get('txn_id'),
                user=request.user,
            )
        )


class LoginInitView(generics.GenericAPIView):
    permission_classes = [AbhaPermission]
    serializer_class = LoginInitSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        patient = get_patient_or_404(data['patient_id'])
        result = initiate_login(
            patient=patient,
            abha_address=data['abha_address'],
            auth_method=data.get('auth_method') or 'aadhaar_otp',
        )
        return Response(result)


class LoginVerifyView(generics.GenericAPIView):
    permission_classes = [AbhaPermission]
    serializer_class = OtpVerifySerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response(
            verify_login(
                session_id=data['session_id'],
                otp=data['otp'],
                txn_id=data.get('txn_id'),
                user=request.user,
            )
        )


class AbhaStatusView(generics.GenericAPIView):
    """GET /api/abha/status/<patient_id>/"""

    permission_classes = [AbhaPermission]

    def get(self, request, patient_id, *args, **kwargs):
        patient = get_patient_or_404(patient_id)
        log_patient_action(request.user, 'abha_status_view', patient_id=patient.pk)
        return Response(abha_status(patient))


class AbhaRecordListView(generics.ListAPIView):
    permission_classes = [AbhaPermission]
    serializer_class = AbhaRecordLinkSerializer
    pagination_class = None

    def get_queryset(self):
        return AbhaRecordLink.objects.filter(patient_id=self.kwargs['patient_id'])

    def list(self, request, *args, **kwargs):
        records = self.get_serializer(self.get_queryset(), many=True).data
        return Response({'records': records})


class UnlinkView(generics.GenericAPIView):
    permission_classes = [AbhaPermission]
    serializer_class = UnlinkSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        patient = get_patient_or_404(serializer.validated_data['patient_id'])
        unlink_abha(patient, user=request.user)
        return Response({'success': True, 'message': 'ABHA account unlinked successfully'})


class AbhaStatsView(generics.GenericAPIView):
    """GET /api/abha/stats/?start_date=&end_date= (both default to today)."""

    permission_classes = [AbhaPermission]

    def get(self, request, *args, **kwargs):
        params = DateRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(abha_stats(params.validated_data.get('start_date'), params.validated_data.get('end_date')))


class AbhaDashboardView(generics.GenericAPIView):
    permission_classes = [AbhaPermission]

    def get(self, request, *args, **kwargs):
        # The dashboard widget sends camelCase dates.
        params = DateRangeSerializer(
            data={
                key: value
                for key, value in (
                    ('start_date', request.query_params.get('startDate')),
                    ('end_date', request.query_params.get('endDate')),
                )
                if value
            }
        )
        params.is_valid(raise_exception=True)
        return Response(abha_dashboard(params.validated_data.get('start_date'), params.validated_data.get('end_date')))


class HfrIdView(generics.GenericAPIView):
    """PATCH /api/abha/hfr-id/ - admin only."""

    permission_classes = [AbhaSettingsPermission]
    serializer_class = HfrIdSerializer

    def patch(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        hfr_id = set_hfr_id(serializer.validated_data['hfr_id'])
        return Response({'success': True, 'hfr_id': hfr_id})
