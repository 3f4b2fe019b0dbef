"""Core app views.

Contains:
- health: Health check endpoint
- LoginView / RefreshView / MeView: JWT bearer-token auth
- DoctorListView: doctors for pickers
- Clinic, staff and audit log admin screens
"""

import logging

from django.db import connection
from django.http import JsonResponse

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from rest_framework_simplejwt.tokens import RefreshToken

from clinic_backend.core.models import AuditLog, Clinic, User
from clinic_backend.core.pagination import ClinicPagination
from clinic_backend.core.permissions import ALL_STAFF_ROLES, IsAdmin, RBACPermission
from clinic_backend.core.serializers import (
    AuditLogSerializer,
    ClinicSerializer,
    DoctorListSerializer,
    LoginSerializer,
    RefreshSerializer,
    RoleSerializer,
    UserCreateSerializer,
    UserMeSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def health(request):
    """Health check endpoint - no authentication required."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1;')
    except Exception as exc:
        logger.error('Health check failed: %s', exc)
        return JsonResponse({'status': 'error', 'detail': str(exc)}, status=503)

    return JsonResponse({'status': 'ok'})


class LoginView(APIView):
    """Obtain JWT access and refresh tokens.

    POST /api/auth/login/
    Body: {"username": "...", "password": "..."} or {"email": "...", "password": "..."}
    Returns: {"user": {...}, "access": "...", "refresh": "..."}
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']

        refresh = RefreshToken.for_user(user)
        role = getattr(user, 'role', None)
        refresh['role'] = role.name if role else None
        refresh['clinic_id'] = user.clinic_id

        logger.info('User %s logged in (role=%s)', user.username, refresh['role'])

        return Response(
            {
                'user': {
                    'id': user.id,
                    'username': user.username,
                    'email': user.email,
                    'first_name': user.first_name,
                    'last_name': user.last_name,
                    'clinic_id': user.clinic_id,
                    'role': RoleSerializer(role).data if role else None,
                },
                'access': str(refresh.access_token),
                'refresh': str(refresh),
            },
            status=status.HTTP_200_OK,
        )


class RefreshView(APIView):
    """Refresh JWT access token.

    POST /api/auth/refresh/
    Body: {"refresh": "..."}
    Returns: {"access": "..."}
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refresh = RefreshToken(serializer.validated_data['refresh'])
        return Response({'access': str(refresh.access_token)}, status=status.HTTP_200_OK)


class MeView(APIView):
    """GET /api/auth/me/"""

    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        serializer = UserMeSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)


class StaffReadPermission(RBACPermission):
    read_roles = ALL_STAFF_ROLES
    write_roles = {"admin"}


class DoctorListView(generics.ListAPIView):
    permission_classes = [StaffReadPermission]
    serializer_class = DoctorListSerializer

    def get_queryset(self):
        qs = User.objects.filter(role__name='doctor', is_active=True).order_by('first_name', 'last_name', 'id')
        clinic_id = self.request.query_params.get('clinic_id')
        if clinic_id:
            qs = qs.filter(clinic_id=clinic_id)
        return qs


class ClinicListCreateView(generics.ListCreateAPIView):
    permission_classes = [StaffReadPermission]
    serializer_class = ClinicSerializer
    queryset = Clinic.objects.all()


class ClinicDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [StaffReadPermission]
    serializer_class = ClinicSerializer
    queryset = Clinic.objects.all()


class UserListCreateView(generics.ListCreateAPIView):
    """Staff accounts (admin only)."""

    permission_classes = [IsAdmin]
    queryset = User.objects.select_related('role').all()

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserCreateSerializer
        return UserSerializer

    def create(self, request, *args, **kwargs):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class AuditLogListView(generics.ListAPIView):
    """GET /api/audit-logs/?patient_id=&action= (admin only)"""

    permission_classes = [IsAdmin]
    serializer_class = AuditLogSerializer
    pagination_class = ClinicPagination

    def get_queryset(self):
        qs = AuditLog.objects.select_related('user').all()
        patient_id = self.request.query_params.get('patient_id')
        if patient_id:
            qs = qs.filter(patient_id=patient_id)
        action = self.request.query_params.get('action')
        if action:
            qs = qs.filter(action=action)
        return qs
