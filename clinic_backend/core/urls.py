"""Core App URLs - Authentication, Health & Staff.

Prefix: /api/
Routes:
    GET  /api/health/          - Health check (no auth)
    POST /api/auth/login/      - JWT token obtain with user/role info
    POST /api/auth/refresh/    - JWT token refresh
    GET  /api/auth/me/         - Current user info (requires auth)
    GET  /api/doctors/         - Active doctors
    *    /api/clinics/         - Clinics
    *    /api/users/           - Staff accounts (admin)
    GET  /api/audit-logs/      - Audit log (admin)
"""

from django.urls import path

from clinic_backend.core.views import (
    AuditLogListView,
    ClinicDetailView,
    ClinicListCreateView,
    DoctorListView,
    health,
    LoginView,
    MeView,
    RefreshView,
    UserListCreateView,
)

app_name = 'core'

urlpatterns = [
    path('health/', health, name='health'),

    # JWT Authentication
    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/refresh/', RefreshView.as_view(), name='refresh'),
    path('auth/me/', MeView.as_view(), name='me'),

    path('doctors/', DoctorListView.as_view(), name='doctors'),
    path('clinics/', ClinicListCreateView.as_view(), name='clinic-list'),
    path('clinics/<int:pk>/', ClinicDetailView.as_view(), name='clinic-detail'),
    path('users/', UserListCreateView.as_view(), name='user-list'),
    path('audit-logs/', AuditLogListView.as_view(), name='audit-logs'),
]
