"""ABHA App URLs.

Prefix: /api/abha/
Routes:
    POST   /api/abha/register/init/            - Send Aadhaar OTP
    POST   /api/abha/register/verify-otp/      - Verify OTP, link or create the patient
    POST   /api/abha/login/init/               - Send ABHA login OTP
    POST   /api/abha/login/verify-otp/         - Verify login OTP, refresh tokens
    GET    /api/abha/status/<patient_id>/      - Linked account + records
    GET    /api/abha/records/<patient_id>/     - Records shared with ABHA
    POST   /api/abha/unlink/                   - Unlink the patient's ABHA
    GET    /api/abha/stats/                    - Account/consent counts (?start_date=&end_date=)
    GET    /api/abha/dashboard/                - Dashboard summary (?startDate=&endDate=)
    PATCH  /api/abha/hfr-id/                   - Set the facility HFR id
"""

from django.urls import path

from .views import (
    AbhaDashboardView,
    AbhaRecordListView,
    AbhaStatsView,
    AbhaStatusView,
    HfrIdView,
    LoginInitView,
    LoginVerifyView,
    RegistrationInitView,
    RegistrationVerifyView,
    UnlinkView,
)

app_name = 'abha'

urlpatterns = [
    path('register/init/', RegistrationInitView.as_view(), name='register-init'),
    path('register/verify-otp/', RegistrationVerifyView.as_view(), name='register-verify'),
    path('login/init/', LoginInitView.as_view(), name='login-init'),
    path('login/verify-otp/', LoginVerifyView.as_view(), name='login-verify'),
    path('status/<int:patient_id>/', AbhaStatusView.as_view(), name='status'),
    path('records/<int:patient_id>/', AbhaRecordListView.as_view(), name='records'),
    path('unlink/', UnlinkView.as_view(), name='unlink'),
    path('stats/', AbhaStatsView.as_view(), name='stats'),
    path('dashboard/', AbhaDashboardView.as_view(), name='dashboard'),
    path('hfr-id/', HfrIdView.as_view(), name='hfr-id'),
]
