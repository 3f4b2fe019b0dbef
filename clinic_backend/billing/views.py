import logging

from django.db.models import Q

from rest_framework import generics, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from clinic_backend.appointments.models import Appointment
from clinic_backend.core.exceptions import NotFound
from clinic_backend.core.pagination import ClinicPagination
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.services import get_patient_or_404

from .models import Bill, PatientSubscription, ReceiptTemplate, SubscriptionPackage
from .permissions import (
    BillPermission,
    ReceiptTemplatePermission,
    SubscriptionPackagePermission,
    SubscriptionPermission,
)
from .serializers import (
    BillCreateSerializer,
    BillPaymentSerializer,
    BillSerializer,
    EnrollSerializer,
    PatientSubscriptionSerializer,
    PaymentStatusSerializer,
    ReceiptTemplateSerializer,
    SubscriptionPackageSerializer,
    UseSessionSerializer,
)
from .services import (
    create_bill,
    default_template_for,
    enroll_patient,
    make_default_template,
    update_appointment_payment_status,
    update_payment,
    use_session,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------


class BillListCreateView(generics.ListCreateAPIView):
    """List bills (search, payment_status, patient_id; paginated) or create one."""

    permission_classes = [BillPermission]
    pagination_class = ClinicPagination

    def get_queryset(self):
        qs = Bill.objects.select_related('patient').prefetch_related('items')
        params = self.request.query_params
        if role_name_of(self.request.user) == 'doctor':
            qs = qs.filter(Q(doctor=self.request.user) | Q(doctor__isnull=True))
        if params.get('patient_id'):
            qs = qs.filter(patient_id=params['patient_id'])
        if params.get('payment_status'):
            qs = qs.filter(payment_status=params['payment_status'])
        search = (params.get('search') or '').strip()
        if search:
            qs = qs.filter(
                Q(patient__name__icontains=search)
                | Q(patient__uhid__icontains=search)
                | Q(patient__phone__icontains=search)
                | Q(bill_number__icontains=search)
            )
        return qs

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return BillCreateSerializer
        return BillSerializer

    def create(self, request, *args, **kwargs):
        serializer = BillCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        patient = get_patient_or_404(data.pop('patient_id'))
        appointment = None
        appointment_id = data.pop('appointment_id', None)
        if appointment_id:
            appointment = Appointment.objects.filter(pk=appointment_id).first()
            if appointment is None:
                raise NotFound('Appointment not found')

        bill = create_bill(
            patient=patient,
            appointment=appointment,
            items=data.pop('items', None),
            user=request.user,
            **data,
        )
        return Response(
            {
                'success': True,
                'message': 'Bill created successfully',
                'bill_id': bill.pk,
                'bill': BillSerializer(bill).data,
            },
            status=status.HTTP_201_CREATED,
        )


class BillDetailView(generics.RetrieveUpdateDestroyAPIView):
    """GET bill with items; PATCH/PUT records a payment; DELETE."""

    permission_classes = [BillPermission]
    queryset = Bill.objects.select_related('patient').prefetch_related('items')

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return BillPaymentSerializer
        return BillSerializer

    def retrieve(self, request, *args, **kwargs):
        bill = self.get_object()
        log_patient_action(request.user, 'bill_view', patient_id=bill.patient_id)
        return Response(BillSerializer(bill).data)

    def update(self, request, *args, **kwargs):
        bill = self.get_object()
        serializer = BillPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bill = update_payment(bill, user=request.user, **serializer.validated_data)
        return Response(BillSerializer(bill).data)

    def destroy(self, request, *args, **kwargs):
        bill = self.get_object()
        patient_id = bill.patient_id
        bill.delete()
        log_patient_action(request.user, 'bill_delete', patient_id=patient_id)
        return Response({'success': True, 'message': 'Bill deleted'}, status=status.HTTP_200_OK)


class PatientBillListView(generics.ListAPIView):
    permission_classes = [BillPermission]
    serializer_class = BillSerializer

    def get_queryset(self):
        patient = get_patient_or_404(self.kwargs['patient_id'])
        return Bill.objects.filter(patient=patient).prefetch_related('items')


class AppointmentPaymentStatusView(generics.GenericAPIView):
    """PATCH /api/appointments/<pk>/payment-status/"""

    permission_classes = [BillPermission]
    serializer_class = PaymentStatusSerializer
    queryset = Appointment.objects.all()

    def patch(self, request, *args, **kwargs):
        appointment = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bill = update_appointment_payment_status(
            appointment,
            serializer.validated_data['payment_status'],
            user=request.user,
        )
        return Response({
            'message': 'Payment status updated successfully',
            'payment_status': bill.payment_status,
            'bill_id': bill.pk,
        })

    def put(self, request, *args, **kwargs):
        return self.patch(request, *args, **kwargs)


# ---------------------------------------------------------------------------
# Receipt templates
# ---------------------------------------------------------------------------


class ReceiptTemplateListCreateView(generics.ListCreateAPIView):
    permission_classes = [ReceiptTemplatePermission]
    serializer_class = ReceiptTemplateSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        qs = ReceiptTemplate.objects.all()
        clinic_id = self.request.query_params.get('clinic_id') or getattr(self.request.user, 'clinic_id', None)
        if clinic_id:
            qs = qs.filter(clinic_id=clinic_id)
        return qs

    def perform_create(self, serializer):
        clinic = serializer.validated_data.get('clinic') or getattr(self.request.user, 'clinic', None)
        template = serializer.save(clinic=clinic)
        if template.is_default:
            make_default_template(template)


class ReceiptTemplateDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [ReceiptTemplatePermission]
    serializer_class = ReceiptTemplateSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    queryset = ReceiptTemplate.objects.all()

    def perform_update(self, serializer):
        template = serializer.save()
        if template.is_default:
            make_default_template(template)

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return Response({'success': True, 'message': 'Receipt template deleted'}, status=status.HTTP_200_OK)


class DefaultReceiptTemplateView(generics.GenericAPIView):
    """GET /api/receipt-templates/default/?clinic_id="""

    permission_classes = [ReceiptTemplatePermission]

    def get(self, request, *args, **kwargs):
        template = default_template_for(request.query_params.get('clinic_id'))
        return Response(ReceiptTemplateSerializer(template, context={'request': request}).data)


# ---------------------------------------------------------------------------
# Subscription packages
# ---------------------------------------------------------------------------


class SubscriptionPackageListCreateView(generics.ListCreateAPIView):
    permission_classes = [SubscriptionPackagePermission]
    serializer_class = SubscriptionPackageSerializer

    def get_queryset(self):
        qs = SubscriptionPackage.objects.select_related('doctor')
        if self.request.query_params.get('include_inactive') not in ('1', 'true'):
            qs = qs.filter(is_active=True)
        if role_name_of(self.request.user) == 'doctor':
            qs = qs.filter(Q(doctor__isnull=True) | Q(doctor=self.request.user))
        elif self.request.query_params.get('doctor_id'):
            qs = qs.filter(doctor_id=self.request.query_params['doctor_id'])
        return qs

    def perform_create(self, serializer):
        if role_name_of(self.request.user) == 'doctor':
            serializer.save(doctor=self.request.user)
        else:
            serializer.save()


class SubscriptionPackageDetailView(generics.RetrieveUpdateDestroyAPIView):
    """DELETE deactivates the package; enrolled subscriptions keep working."""

    permission_classes = [SubscriptionPackagePermission]
    serializer_class = SubscriptionPackageSerializer
    queryset = SubscriptionPackage.objects.select_related('doctor')

    def destroy(self, request, *args, **kwargs):
        package = self.get_object()
        package.is_active = False
        package.save(update_fields=['is_active', 'updated_at'])
        return Response({'success': True, 'message': 'Package deleted'}, status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


class EnrollPatientView(generics.GenericAPIView):
    permission_classes = [SubscriptionPermission]
    serializer_class = EnrollSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        patient = get_patient_or_404(data['patient_id'])
        package = SubscriptionPackage.objects.filter(pk=data['package_id']).first()
        if package is None:
            raise NotFound('Package not found')

        subscription = enroll_patient(
            patient=patient,
            package=package,
            start_date=data['start_date'],
            amount_paid=data.get('amount_paid'),
            notes=data.get('notes', ''),
            user=request.user,
        )
        return Response(
            {
                'success': True,
                'message': 'Patient enrolled successfully',
                'subscription_id': subscription.pk,
                'subscription_code': subscription.code,
                'subscription': PatientSubscriptionSerializer(subscription).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PatientSubscriptionListView(generics.ListAPIView):
    permission_classes = [SubscriptionPermission]
    serializer_class = PatientSubscriptionSerializer

    def get_queryset(self):
        patient = get_patient_or_404(self.kwargs['patient_id'])
        return PatientSubscription.objects.filter(patient=patient).select_related('package')


class UseSessionView(generics.GenericAPIView):
    """POST /api/subscriptions/<pk>/use-session/"""

    permission_classes = [SubscriptionPermission]
    serializer_class = UseSessionSerializer
    queryset = PatientSubscription.objects.select_related('package')

    def post(self, request, *args, **kwargs):
        subscription = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        appointment_id = serializer.validated_data.get('appointment_id')
        appointment = Appointment.objects.filter(pk=appointment_id).first() if appointment_id else None

        subscription = use_session(subscription, appointment=appointment, user=request.user)
        return Response({
            'success': True,
            'message': 'Session recorded',
            'sessions_used': subscription.sessions_used,
            'sessions_remaining': subscription.sessions_remaining,
            'status': subscription.status,
        })
